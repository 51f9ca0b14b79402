"""Sources package.

Provides the built-in guideline catalogue shipped with the server.
"""

from .loader import (
    CatalogueEntry,
    DEFAULT_CATALOGUE,
    load_builtin_guidelines
)

__all__ = [
    'CatalogueEntry',
    'DEFAULT_CATALOGUE',
    'load_builtin_guidelines'
]
