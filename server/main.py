"""Entry point for the guideline MCP server.

Reads configuration from the environment (and a ``.env`` file):
- CONFLUENCE_BASE_URL, CONFLUENCE_EMAIL, CONFLUENCE_API_TOKEN, CONFLUENCE_MAIN_PAGE_ID: required
- USE_HTTP: set to "false" for stdio mode (default: HTTP mode)
- PORT: HTTP server port (default: 8080)
- LOG_LEVEL: ERROR, WARN, INFO or DEBUG (default: INFO)
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv

from config import ServerSettings, ConfigurationError, normalize_log_level
from guidelines.store import GuidelineStore
from observability import setup_logging
from pipelines.aggregator import GuidelineAggregator
from pipelines.confluence import ConfluenceClient
from sources.loader import load_builtin_guidelines
from .context_injection import ContextInjector
from .http_app import create_app
from .mcp_server import MCPServer
from .stdio import serve_stdio

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Guideline MCP server")
    transport = parser.add_mutually_exclusive_group()
    transport.add_argument("--stdio", action="store_true", help="Serve over standard input/output")
    transport.add_argument("--http", action="store_true", help="Serve over HTTP")
    parser.add_argument("--port", type=int, help="HTTP port (overrides PORT)")
    parser.add_argument("--host", help="HTTP bind address (overrides HOST)")
    parser.add_argument("--log-level", help="ERROR, WARN, INFO or DEBUG (overrides LOG_LEVEL)")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> ServerSettings:
    """Environment settings with command line overrides applied."""
    settings = ServerSettings.from_env()
    updates = {}
    if args.stdio:
        updates["use_http"] = False
    elif args.http:
        updates["use_http"] = True
    if args.port is not None:
        updates["port"] = args.port
    if args.host:
        updates["host"] = args.host
    if args.log_level:
        updates["log_level"] = normalize_log_level(args.log_level)
    return settings.model_copy(update=updates) if updates else settings


async def run(settings: ServerSettings) -> None:
    """Load the corpus, then serve until the transport stops."""
    store = GuidelineStore()
    builtin = [] if settings.builtin_disabled else load_builtin_guidelines(settings.builtin_guidelines)

    async with ConfluenceClient(
        settings.confluence_base_url,
        settings.confluence_email,
        settings.confluence_api_token,
        request_timeout=settings.request_timeout,
        max_retries=settings.max_retries
    ) as client:
        aggregator = GuidelineAggregator(client, store, builtin_records=builtin)
        await aggregator.load(settings.root_page_id)

        injector = ContextInjector(store, server_url=settings.server_url)
        mcp_server = MCPServer(store, injector=injector, aggregator=aggregator,
                               root_page_id=settings.root_page_id)

        if settings.use_http:
            logger.info(f"Starting HTTP MCP server on port {settings.port}")
            logger.info(f"Access MCP server at: {settings.server_url}")
            app = create_app(mcp_server, settings.allowed_origins)
            config = uvicorn.Config(app, host=settings.host, port=settings.port,
                                    log_level=settings.log_level.lower(), log_config=None)
            await uvicorn.Server(config).serve()
        else:
            logger.info("Starting in stdio mode")
            await serve_stdio(mcp_server)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    try:
        settings = build_settings(args)
    except ConfigurationError as e:
        setup_logging(level=normalize_log_level(args.log_level))
        logger.error(f"Failed to start server: {e}")
        return 1

    setup_logging(level=settings.log_level, log_file=settings.log_file, use_json=settings.log_json)

    try:
        settings.require()
    except ConfigurationError as e:
        logger.error(f"Failed to start server: {e}")
        return 1

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        logger.error(f"Failed to start server: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
