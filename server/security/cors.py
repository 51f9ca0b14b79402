"""CORS (Cross-Origin Resource Sharing) configuration for the MCP endpoint."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

def get_cors_config(origins: Optional[List[str]] = None) -> dict:
    """Get CORS configuration for the MCP endpoint (JSON-RPC POSTs only)."""
    allow_origins = origins or ["*"]
    return {
        "allow_origins": allow_origins,
        # Credentials cannot be combined with a wildcard origin
        "allow_credentials": "*" not in allow_origins,
        "allow_methods": ["POST", "OPTIONS"],
        "allow_headers": ["Content-Type"],
        "max_age": 600
    }

def setup_cors(app: FastAPI, origins: Optional[List[str]] = None) -> None:
    """Setup CORS middleware for FastAPI application."""
    config = get_cors_config(origins)
    app.add_middleware(CORSMiddleware, **config)
    logger.debug(f"CORS enabled for origins: {config['allow_origins']}")
