"""Data models for the guideline corpus."""

from dataclasses import dataclass
from typing import Dict, Optional


def default_title(page_id: str) -> str:
    """Placeholder title for pages that do not carry one."""
    return f"Page {page_id}"


@dataclass(frozen=True)
class GuidelineRecord:
    """One normalized guideline page keyed by its remote identifier."""
    id: str
    title: str
    text: str
    source_url: str

    @classmethod
    def build(cls, page_id: str, title: Optional[str], body: str, source_url: str) -> 'GuidelineRecord':
        """Create a record, appending the provenance marker to the body."""
        return cls(
            id=page_id,
            title=title or default_title(page_id),
            text=f"{body}\nURL: {source_url}",
            source_url=source_url,
        )

    def to_summary(self) -> Dict[str, str]:
        return {"id": self.id, "title": self.title}


@dataclass
class PageContent:
    """Raw page as returned by the remote source."""
    page_id: str
    title: str
    html: str
    url: str


@dataclass
class FetchOutcome:
    """Result of fetching one page: either a record or the error that stopped it."""
    page_id: str
    record: Optional[GuidelineRecord] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.record is not None and self.error is None
