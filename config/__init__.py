"""Configuration module.

Provides environment-driven settings for the remote source, transport and logging.
"""

from .settings import (
    ServerSettings,
    ConfigurationError,
    normalize_log_level
)

__all__ = [
    'ServerSettings',
    'ConfigurationError',
    'normalize_log_level'
]
