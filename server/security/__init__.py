"""Security package for the guideline server HTTP transport."""

from .cors import get_cors_config, setup_cors

__all__ = [
    "get_cors_config",
    "setup_cors"
]
