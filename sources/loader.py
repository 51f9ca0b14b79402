"""Built-in guideline catalogue loader.

Loads curated guideline entries shipped with the server from a YAML file.
The entries are merged into every load pass after the remote pages.
"""

import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass
import logging

from guidelines.models import GuidelineRecord

logger = logging.getLogger(__name__)

DEFAULT_CATALOGUE = Path(__file__).parent / "builtin_guidelines.yaml"

@dataclass
class CatalogueEntry:
    """One curated guideline in the catalogue."""
    id: str
    title: str
    text: str
    url: Optional[str] = None

    def __post_init__(self):
        """Validate entry after initialization."""
        if not self.id:
            raise ValueError("Guideline id cannot be empty")

        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError(f"Guideline {self.id} has no text")

        if self.url is None:
            self.url = f"internal://{self.id}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CatalogueEntry':
        """Create CatalogueEntry from dictionary."""
        return cls(
            id=str(data['id']),
            title=data.get('title') or '',
            text=data['text'],
            url=data.get('url')
        )

    def to_record(self) -> GuidelineRecord:
        # Line breaks in catalogue text are preserved
        return GuidelineRecord.build(self.id, self.title, self.text.strip(), self.url)

def load_builtin_guidelines(path: Optional[Path] = None) -> List[GuidelineRecord]:
    """Load the built-in guideline catalogue.

    Args:
        path: YAML catalogue file. Defaults to the packaged catalogue.

    Returns:
        Records in file order; an empty list if the file is missing or invalid
    """
    yaml_file = Path(path) if path is not None else DEFAULT_CATALOGUE

    if not yaml_file.exists():
        logger.warning(f"Guideline catalogue not found: {yaml_file}")
        return []

    try:
        with open(yaml_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read guideline catalogue {yaml_file}: {e}")
        return []

    if not isinstance(data, dict) or not isinstance(data.get('guidelines'), list):
        logger.error(f"Empty or invalid guideline catalogue: {yaml_file}")
        return []

    records = []
    for raw in data['guidelines']:
        try:
            records.append(CatalogueEntry.from_dict(raw).to_record())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Invalid catalogue entry in {yaml_file}: {e}")

    logger.info(f"Loaded {len(records)} built-in guidelines from {yaml_file.name}")
    return records
