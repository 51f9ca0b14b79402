"""Context injection for inbound MCP requests.

Every request is scanned with keyword rules and gets an excerpt of the
guideline corpus merged into ``params.context`` before it is dispatched.
Classification is best-effort and fails open: a request that cannot be
scanned is forwarded untouched.
"""

import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from guidelines.store import GuidelineStore
from guidelines.views import combined_view

logger = logging.getLogger(__name__)

CATEGORY_API = "api-shape"
CATEGORY_LOGGING = "logging"
CATEGORY_DATA_ACCESS = "data-access"
CATEGORY_FULL = "full-corpus"

INITIALIZE_METHOD = "initialize"
ENFORCED_METHOD_MARKERS = ("completion", "hover", "codeAction", "diagnostic", "symbol")

ENFORCEMENT_INSTRUCTION = "ENFORCE the team coding guidelines in all responses - any workspace"


@dataclass(frozen=True)
class InjectionRule:
    """Keyword predicate bound to a category and its preamble."""
    category: str
    keywords: Tuple[str, ...]
    preamble: str

    def matches(self, scan_text: str) -> bool:
        return any(keyword in scan_text for keyword in self.keywords)


DEFAULT_RULES: Tuple[InjectionRule, ...] = (
    InjectionRule(
        category=CATEGORY_API,
        keywords=(
            "[route", "[http", "@app.", "@router.", "app.get(", "app.post(",
            "mapget", "mappost", "endpoint", "controller", "/api/",
        ),
        preamble=(
            "API DESIGN GUIDELINES: endpoints use lowercase kebab-case paths with "
            "plural nouns, never underscores; version routes as /api/v1/; return "
            "DTOs with the appropriate HTTP status codes."
        ),
    ),
    InjectionRule(
        category=CATEGORY_LOGGING,
        keywords=(
            "logger", "logging", "ilogger", "console.writeline", "console.log",
            "print(", "serilog", "log.info", "log.error",
        ),
        preamble=(
            "LOGGING GUIDELINES: use the injected logger with structured, named "
            "parameters; no console output in production code; never log secrets "
            "or personal data."
        ),
    ),
    InjectionRule(
        category=CATEGORY_DATA_ACCESS,
        keywords=(
            "dbcontext", "repository", "entity framework", "select ", "insert into",
            "sql", "query", "tolistasync", "savechanges", "cursor.execute",
        ),
        preamble=(
            "DATA ACCESS GUIDELINES: go through repositories and a unit of work, "
            "never the database context from controllers; use no-tracking, "
            "projected, async, parameterized queries."
        ),
    ),
)

DEFAULT_PREAMBLE = (
    "TEAM CODING GUIDELINES: apply every guideline below to the code you read, "
    "review or generate."
)


def scan_text(request: Dict[str, Any]) -> str:
    """Serialize a request body into the lowercase string the rules scan."""
    return json.dumps(request, default=str, sort_keys=True).lower()


def classify(text: str, rules: Sequence[InjectionRule] = DEFAULT_RULES) -> str:
    """Return the category of the first rule matching ``text``."""
    for rule in rules:
        if rule.matches(text):
            return rule.category
    return CATEGORY_FULL


def preamble_for(category: str, rules: Sequence[InjectionRule] = DEFAULT_RULES) -> str:
    for rule in rules:
        if rule.category == category:
            return rule.preamble
    return DEFAULT_PREAMBLE


def build_excerpt(category: str, store: GuidelineStore,
                  rules: Sequence[InjectionRule] = DEFAULT_RULES) -> str:
    """Category preamble followed by the combined view of the corpus."""
    return f"{preamble_for(category, rules)}\n\n{combined_view(store)}"


def is_enforced_method(method: str) -> bool:
    if method == INITIALIZE_METHOD:
        return True
    return any(marker in method for marker in ENFORCED_METHOD_MARKERS)


class ContextInjector:
    """Merges guideline excerpts into request parameters."""

    def __init__(self,
                 store: GuidelineStore,
                 rules: Sequence[InjectionRule] = DEFAULT_RULES,
                 server_url: str = "http://localhost:8080/mcp"):
        self.store = store
        self.rules = tuple(rules)
        self.server_url = server_url

    def inject(self, request: Any) -> Any:
        """Return ``request`` with guideline context merged into its params.

        The request is never rejected: anything that cannot be classified or
        merged is returned exactly as it came in.
        """
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            return request

        try:
            return self._inject(request)
        except Exception as e:
            logger.warning(f"Skipping context injection for {request.get('method')}: {e}")
            return request

    def _inject(self, request: Dict[str, Any]) -> Dict[str, Any]:
        method = request["method"]
        params = request.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            logger.debug(f"Params of {method} are not an object, skipping injection")
            return request

        context = params.get("context")
        if context is None:
            context = {}
        if not isinstance(context, dict):
            logger.debug(f"Context of {method} is not an object, skipping injection")
            return request

        category = classify(scan_text(request), self.rules)

        enriched_params = dict(params)
        enriched_context = dict(context)
        enriched_context["guidelineCategory"] = category
        enriched_context["guidelines"] = build_excerpt(category, self.store, self.rules)

        if is_enforced_method(method):
            enriched_context["guidelinesActive"] = True
            enriched_context["guidelinesServer"] = self.server_url
            enriched_context["instruction"] = ENFORCEMENT_INSTRUCTION
            enriched_context["workspaceAgnostic"] = True

        if method == INITIALIZE_METHOD:
            capabilities = enriched_params.get("capabilities")
            if capabilities is None:
                capabilities = {}
            if isinstance(capabilities, dict):
                capabilities = copy.copy(capabilities)
                capabilities["guidelines"] = {
                    "guidelinesActive": True,
                    "enforceStandards": True,
                    "serverUrl": self.server_url,
                }
                enriched_params["capabilities"] = capabilities

        enriched_params["context"] = enriched_context
        enriched = dict(request)
        enriched["params"] = enriched_params
        logger.debug(f"Injected {category} guidelines into {method}")
        return enriched
