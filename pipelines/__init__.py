"""Pipelines package.

Provides remote page fetching, HTML to text normalization and the guideline
tree aggregator.
"""

from .confluence import ConfluenceClient, ConfluenceError, PageSource, parse_page, parse_child_ids
from .html_text import normalize_whitespace, extract_text, extract_title
from .aggregator import GuidelineAggregator, LoadReport, page_to_record

__all__ = [
    # Remote source
    'ConfluenceClient',
    'ConfluenceError',
    'PageSource',
    'parse_page',
    'parse_child_ids',

    # Text
    'normalize_whitespace',
    'extract_text',
    'extract_title',

    # Aggregation
    'GuidelineAggregator',
    'LoadReport',
    'page_to_record'
]
