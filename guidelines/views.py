"""Read views over the guideline store.

All views are computed from the current store contents on every call.
"""

from typing import Dict, List, Optional, Tuple

from .store import GuidelineStore

SINGLE_SCHEME = "guideline://"
COMBINED_URI = "guidelines://all"
CONDENSED_URI = "guidelines://context"

COMBINED_SEPARATOR = "\n\n"
CONDENSED_SEPARATOR = " | "

VIEW_SINGLE = "single"
VIEW_COMBINED = "combined"
VIEW_CONDENSED = "condensed"


def missing_text(guideline_id: str) -> str:
    return f"No content found for guideline '{guideline_id}'."


def single_view(store: GuidelineStore, guideline_id: str) -> str:
    """Text of one guideline, or a placeholder when the id is unknown."""
    record = store.get(guideline_id)
    if record is None:
        return missing_text(guideline_id)
    return record.text


def combined_view(store: GuidelineStore) -> str:
    """Every guideline as a ``### title`` section, for full-context use."""
    return COMBINED_SEPARATOR.join(
        f"### {record.title}\n{record.text}" for record in store.records()
    )


def condensed_view(store: GuidelineStore) -> str:
    """Every guideline on one line, for size-constrained contexts."""
    return CONDENSED_SEPARATOR.join(
        f"{record.title}: {record.text}" for record in store.records()
    )


def list_guidelines(store: GuidelineStore) -> List[Dict[str, str]]:
    return [record.to_summary() for record in store.records()]


def guideline_uri(guideline_id: str) -> str:
    return f"{SINGLE_SCHEME}{guideline_id}"


def parse_resource_uri(uri: str) -> Tuple[str, Optional[str]]:
    """Map a resource URI to its view kind and, for single views, the id.

    Raises:
        ValueError: if the URI does not belong to one of the guideline views
    """
    if uri == COMBINED_URI:
        return VIEW_COMBINED, None
    if uri == CONDENSED_URI:
        return VIEW_CONDENSED, None
    if uri.startswith(SINGLE_SCHEME):
        guideline_id = uri[len(SINGLE_SCHEME):].strip("/")
        if not guideline_id:
            raise ValueError(f"Missing guideline id in URI: {uri}")
        return VIEW_SINGLE, guideline_id
    raise ValueError(f"Invalid URI scheme: {uri}")


def render_uri(store: GuidelineStore, uri: str) -> str:
    """Resolve a resource URI to the text of its view."""
    kind, guideline_id = parse_resource_uri(uri)
    if kind == VIEW_COMBINED:
        return combined_view(store)
    if kind == VIEW_CONDENSED:
        return condensed_view(store)
    return single_view(store, guideline_id)
