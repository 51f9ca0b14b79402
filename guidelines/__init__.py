"""Guidelines package.

Provides the record model, the in-memory store and the read views over it.
"""

from .models import GuidelineRecord, PageContent, FetchOutcome, default_title
from .store import GuidelineStore
from .views import (
    COMBINED_URI,
    CONDENSED_URI,
    single_view,
    combined_view,
    condensed_view,
    list_guidelines,
    guideline_uri,
    parse_resource_uri,
    render_uri,
)

__all__ = [
    # Models
    'GuidelineRecord',
    'PageContent',
    'FetchOutcome',
    'default_title',

    # Store
    'GuidelineStore',

    # Views
    'COMBINED_URI',
    'CONDENSED_URI',
    'single_view',
    'combined_view',
    'condensed_view',
    'list_guidelines',
    'guideline_uri',
    'parse_resource_uri',
    'render_uri',
]
