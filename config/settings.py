"""Server configuration.

Settings are read from environment variables (a ``.env`` file is loaded by the
entry point) and may be overridden from the command line.
"""

import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

LOG_LEVEL_ALIASES = {
    "ERROR": "ERROR",
    "WARN": "WARNING",
    "WARNING": "WARNING",
    "INFO": "INFO",
    "DEBUG": "DEBUG",
}


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() not in ("false", "0", "no", "off")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def normalize_log_level(level: Optional[str]) -> str:
    """Map a user supplied level name to a logging level name, defaulting to INFO."""
    return LOG_LEVEL_ALIASES.get((level or "INFO").strip().upper(), "INFO")


class ServerSettings(BaseModel):
    """Guideline server configuration."""
    # Remote source
    confluence_base_url: Optional[str] = Field(default=None, description="Confluence base URL")
    confluence_email: Optional[str] = Field(default=None, description="Account email for basic auth")
    confluence_api_token: Optional[str] = Field(default=None, description="API token for basic auth")
    root_page_id: Optional[str] = Field(default=None, description="Root guideline page id")
    request_timeout: int = Field(default=30, description="Remote request timeout in seconds")
    max_retries: int = Field(default=2, description="Retries for transient remote failures")

    # Built-in catalogue; None uses the packaged file, "none" disables it
    builtin_guidelines: Optional[str] = Field(default=None, description="Built-in guideline catalogue path")

    # Transport
    use_http: bool = Field(default=True, description="Serve over HTTP instead of stdio")
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=8080, description="HTTP port")
    public_url: Optional[str] = Field(default=None, description="Advertised server URL")
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"], description="CORS origins")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=False, description="JSON log output")
    log_file: Optional[str] = Field(default=None, description="Optional JSON log file")

    @classmethod
    def from_env(cls) -> 'ServerSettings':
        """Create configuration from environment variables."""
        origins = os.getenv('ALLOWED_ORIGINS', '')
        return cls(
            confluence_base_url=os.getenv('CONFLUENCE_BASE_URL') or None,
            confluence_email=os.getenv('CONFLUENCE_EMAIL') or None,
            confluence_api_token=os.getenv('CONFLUENCE_API_TOKEN') or None,
            root_page_id=os.getenv('CONFLUENCE_MAIN_PAGE_ID') or None,
            request_timeout=_env_int('REQUEST_TIMEOUT', 30),
            max_retries=_env_int('MAX_RETRIES', 2),
            builtin_guidelines=os.getenv('BUILTIN_GUIDELINES') or None,
            use_http=_env_bool('USE_HTTP', True),
            host=os.getenv('HOST', '0.0.0.0'),
            port=_env_int('PORT', 8080),
            public_url=os.getenv('PUBLIC_URL') or None,
            allowed_origins=[o.strip() for o in origins.split(',') if o.strip()] or ["*"],
            log_level=normalize_log_level(os.getenv('LOG_LEVEL')),
            log_json=_env_bool('LOG_JSON', False),
            log_file=os.getenv('LOG_FILE') or None
        )

    @property
    def server_url(self) -> str:
        """URL clients are told to use for this server."""
        return self.public_url or f"http://localhost:{self.port}/mcp"

    @property
    def builtin_disabled(self) -> bool:
        return (self.builtin_guidelines or "").strip().lower() == "none"

    def missing_required(self) -> List[str]:
        """Names of the environment variables that are required but unset."""
        required = {
            'CONFLUENCE_BASE_URL': self.confluence_base_url,
            'CONFLUENCE_EMAIL': self.confluence_email,
            'CONFLUENCE_API_TOKEN': self.confluence_api_token,
            'CONFLUENCE_MAIN_PAGE_ID': self.root_page_id,
        }
        return [name for name, value in required.items() if not value]

    def require(self) -> None:
        """Raise ConfigurationError if any required setting is missing."""
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
