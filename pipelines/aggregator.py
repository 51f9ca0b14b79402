"""Guideline tree aggregator.

Walks a root page and its direct children on the remote source and publishes
the result into the guideline store. Only the root is required; child
failures thin the corpus instead of aborting the load.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from guidelines.models import FetchOutcome, GuidelineRecord, PageContent
from guidelines.store import GuidelineStore
from .confluence import PageSource
from .html_text import extract_text, extract_title

logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """Summary of one load pass."""
    root_id: str
    loaded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    children_enumerated: bool = True
    builtin: int = 0

    @property
    def total(self) -> int:
        return len(self.loaded) + self.builtin


def page_to_record(page: PageContent) -> GuidelineRecord:
    """Normalize a fetched page into a guideline record."""
    title = page.title or extract_title(page.html)
    return GuidelineRecord.build(page.page_id, title, extract_text(page.html), page.url)


class GuidelineAggregator:
    """Builds the guideline store from a two-level page tree."""

    def __init__(self,
                 source: PageSource,
                 store: GuidelineStore,
                 builtin_records: Optional[Iterable[GuidelineRecord]] = None):
        """Initialize aggregator.

        Args:
            source: Remote page source
            store: Store that receives each completed snapshot
            builtin_records: Curated records merged after the remote pages
        """
        self.source = source
        self.store = store
        self.builtin_records = list(builtin_records or [])
        self.last_report: Optional[LoadReport] = None
        self._lock = asyncio.Lock()

    async def _fetch_child(self, page_id: str) -> FetchOutcome:
        try:
            page = await self.source.fetch_page(page_id)
            return FetchOutcome(page_id=page_id, record=page_to_record(page))
        except Exception as e:
            return FetchOutcome(page_id=page_id, error=e)

    async def _child_ids(self, root_id: str) -> Optional[List[str]]:
        try:
            return await self.source.fetch_child_ids(root_id)
        except Exception as e:
            logger.warning(f"Could not list child pages of {root_id}: {e}")
            return None

    async def load(self, root_id: str) -> GuidelineStore:
        """Rebuild the store from the page tree under ``root_id``.

        Raises:
            Exception: whatever the source raised when fetching the root page;
                the store keeps its previous snapshot in that case
        """
        async with self._lock:
            logger.info(f"Loading guidelines from page ID: {root_id}")
            report = LoadReport(root_id=root_id)
            records: Dict[str, GuidelineRecord] = {}

            root_page = await self.source.fetch_page(root_id)
            root_record = page_to_record(root_page)
            records[root_id] = root_record
            report.loaded.append(root_id)
            logger.info(f"Loaded root guideline: {root_record.title}")

            child_ids = await self._child_ids(root_id)
            if child_ids is None:
                report.children_enumerated = False
                child_ids = []
            logger.info(f"Found {len(child_ids)} child guideline pages")

            outcomes = await asyncio.gather(*(self._fetch_child(child_id) for child_id in child_ids))

            # Outcomes keep enumeration order, so duplicate ids resolve to the last one.
            for outcome in outcomes:
                if outcome.ok:
                    records[outcome.page_id] = outcome.record
                    report.loaded.append(outcome.page_id)
                    logger.debug(f"Loaded guideline: {outcome.record.title}")
                else:
                    report.failed.append(outcome.page_id)
                    logger.error(f"Failed to load guideline page {outcome.page_id}: {outcome.error}")

            for record in self.builtin_records:
                records[record.id] = record
            report.builtin = len(self.builtin_records)

            self.store.publish(records)
            self.last_report = report
            logger.info(f"Total guidelines loaded: {len(self.store)}")
            return self.store
