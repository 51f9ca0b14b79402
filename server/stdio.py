"""Line-delimited JSON-RPC over standard input/output."""

import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional, TextIO

from .mcp_server import MCPServer, PARSE_ERROR, error_response

logger = logging.getLogger(__name__)


async def handle_line(server: MCPServer, line: str) -> Optional[Dict[str, Any]]:
    """Handle one input line, returning the response to write (if any)."""
    line = line.strip()
    if not line:
        return None
    try:
        request_data = json.loads(line)
    except json.JSONDecodeError as e:
        return error_response(None, PARSE_ERROR, f"Parse error: {e}")
    return await server.handle_request(request_data)


async def serve_stdio(server: MCPServer,
                      stdin: Optional[TextIO] = None,
                      stdout: Optional[TextIO] = None) -> None:
    """Serve requests from stdin until it is closed."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    loop = asyncio.get_running_loop()
    logger.info("MCP server running with stdio transport")

    while True:
        line = await loop.run_in_executor(None, stdin.readline)
        if not line:
            break

        response = await handle_line(server, line)
        if response is not None:  # Don't send response for notifications
            stdout.write(json.dumps(response) + "\n")
            stdout.flush()

    logger.info("stdin closed, stopping stdio transport")
