"""In-memory guideline store.

The store is rebuilt on every load pass and never patched record by record.
The aggregator is its only writer; everything else holds a reference and reads.
"""

import logging
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from .models import GuidelineRecord

logger = logging.getLogger(__name__)


class GuidelineStore:
    """Mapping of guideline id to record with atomic snapshot replacement."""

    def __init__(self, records: Optional[Dict[str, GuidelineRecord]] = None):
        self._records: Dict[str, GuidelineRecord] = dict(records or {})
        self.generation = 0
        self.loaded_at: Optional[datetime] = None

    def get(self, guideline_id: str) -> Optional[GuidelineRecord]:
        """Return the record for ``guideline_id`` or None when it is not loaded."""
        return self._records.get(guideline_id)

    def records(self) -> List[GuidelineRecord]:
        """All records in the insertion order of the last build pass."""
        return list(self._records.values())

    def ids(self) -> List[str]:
        return list(self._records.keys())

    def publish(self, records: Dict[str, GuidelineRecord]) -> None:
        """Swap in a freshly built mapping.

        The new dict is copied before the reference is replaced, so readers
        observe either the previous snapshot or the complete new one.
        """
        snapshot = dict(records)
        self._records = snapshot
        self.generation += 1
        self.loaded_at = datetime.utcnow()
        logger.debug(f"Published guideline snapshot {self.generation} with {len(snapshot)} records")

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, guideline_id: object) -> bool:
        return guideline_id in self._records

    def __iter__(self) -> Iterator[GuidelineRecord]:
        return iter(self.records())
