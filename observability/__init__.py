"""Observability package for the guideline server."""

from .logging import setup_logging, get_logger, JSONFormatter, ColoredFormatter

__all__ = [
    'setup_logging',
    'get_logger',
    'JSONFormatter',
    'ColoredFormatter'
]
