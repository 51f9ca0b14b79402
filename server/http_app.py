"""HTTP transport for the guideline MCP server.

One JSON-RPC request per POST to ``/mcp``; no sessions are kept between calls.
"""

import json
import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from .mcp_server import MCPServer, PARSE_ERROR, error_response
from .security import setup_cors

logger = logging.getLogger(__name__)


def create_app(mcp_server: MCPServer, allowed_origins: Optional[List[str]] = None) -> FastAPI:
    """Create the FastAPI application serving ``mcp_server``."""
    app = FastAPI(title="Guideline MCP Server", version=mcp_server.server_info["version"])
    setup_cors(app, allowed_origins)
    app.state.mcp_server = mcp_server

    @app.get("/health")
    async def health():
        """Liveness plus the size of the loaded corpus."""
        store = mcp_server.store
        return {
            "status": "ok",
            "guidelines": len(store),
            "generation": store.generation,
            "loaded_at": store.loaded_at.isoformat() + "Z" if store.loaded_at else None
        }

    @app.post("/mcp")
    async def mcp_endpoint(request: Request):
        raw = await request.body()
        try:
            body = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return JSONResponse(status_code=400, content=error_response(None, PARSE_ERROR, f"Parse error: {e}"))

        if isinstance(body, dict):
            params = body.get("params") if isinstance(body.get("params"), dict) else {}
            text_document = params.get("textDocument") if isinstance(params.get("textDocument"), dict) else {}
            logger.debug(
                f"MCP request {body.get('method', 'no method')} from workspace "
                f"{params.get('workspaceUri', 'unknown')} (document: {text_document.get('uri', 'none')})"
            )

        response = await mcp_server.handle_request(body)
        if response is None:
            return Response(status_code=202)
        return JSONResponse(content=response)

    return app
