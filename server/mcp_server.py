# Guideline MCP Server - JSON-RPC 2.0 implementation
# Implements Model Context Protocol for serving the guideline corpus

import logging
from typing import Dict, Any, List, Optional, Callable, Awaitable

from guidelines.store import GuidelineStore
from guidelines.views import (
    COMBINED_URI,
    CONDENSED_URI,
    combined_view,
    guideline_uri,
    render_uri,
    single_view,
)
from .context_injection import ContextInjector

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class MethodNotFound(Exception):
    """Raised for JSON-RPC methods the server does not implement."""
    pass


PROMPTS = [
    {
        "name": "code-review",
        "description": "Review code against every team guideline",
        "arguments": [
            {"name": "code", "description": "Code to review", "required": True},
        ],
    },
    {
        "name": "generate-code",
        "description": "Generate code that follows the team guidelines",
        "arguments": [
            {"name": "task", "description": "What the code should do", "required": True},
            {"name": "language", "description": "Target language", "required": False},
        ],
    },
    {
        "name": "explain-guideline",
        "description": "Explain a single guideline with examples",
        "arguments": [
            {"name": "id", "description": "Guideline id", "required": True},
        ],
    },
]

TOOLS = [
    {
        "name": "check_api_naming",
        "description": "Check an API endpoint path against the kebab-case naming standard",
        "inputSchema": {
            "type": "object",
            "properties": {
                "endpoint": {
                    "type": "string",
                    "description": "Endpoint path, e.g. /api/v1/user-profiles"
                }
            },
            "required": ["endpoint"]
        }
    },
    {
        "name": "ping",
        "description": "Health check; echoes a message and reports how many guidelines are loaded",
        "inputSchema": {
            "type": "object",
            "properties": {
                "message": {
                    "type": "string",
                    "description": "Text to echo back"
                }
            }
        }
    },
    {
        "name": "get_guideline",
        "description": "Get the full text of one guideline by id",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {
                    "type": "string",
                    "description": "Guideline id"
                }
            },
            "required": ["id"]
        }
    },
    {
        "name": "reload_guidelines",
        "description": "Reload the guideline corpus from the remote source",
        "inputSchema": {
            "type": "object",
            "properties": {}
        }
    }
]


def check_endpoint_naming(endpoint: str) -> Dict[str, Any]:
    """Classify an endpoint path as compliant (hyphens) or violating (underscores)."""
    violating = "_" in endpoint
    result = {"endpoint": endpoint, "compliant": not violating}
    if violating:
        result["suggestion"] = endpoint.replace("_", "-").lower()
    return result


def text_result(text: str, is_error: bool = False) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}], "isError": is_error}


def _required_argument(arguments: Dict[str, Any], name: str) -> str:
    value = arguments.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing required argument: {name}")
    return str(value)


class MCPServer:
    def __init__(self,
                 store: GuidelineStore,
                 injector: Optional[ContextInjector] = None,
                 aggregator=None,
                 root_page_id: Optional[str] = None):
        """Initialize server.

        Args:
            store: Guideline store read by every handler
            injector: Context injector applied to each request before dispatch
            aggregator: GuidelineAggregator used by the reload tool
            root_page_id: Root page the reload tool rebuilds from
        """
        self.store = store
        self.injector = injector
        self.aggregator = aggregator
        self.root_page_id = root_page_id
        self.capabilities = {
            "resources": {
                "subscribe": False,
                "listChanged": False
            },
            "prompts": {
                "listChanged": False
            },
            "tools": {
                "listChanged": False
            }
        }
        self.server_info = {
            "name": "best-practices",
            "version": "0.2.0"
        }
        self.session_initialized = False
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Optional[Dict[str, Any]]]]] = {
            "initialize": self.handle_initialize,
            "ping": self.handle_ping,
            "resources/list": self.handle_resources_list,
            "resources/templates/list": self.handle_resource_templates_list,
            "resources/read": self.handle_resources_read,
            "prompts/list": self.handle_prompts_list,
            "prompts/get": self.handle_prompts_get,
            "tools/list": self.handle_tools_list,
            "tools/call": self.handle_tools_call,
        }

    async def handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle MCP initialize request"""
        client_info = params.get("clientInfo") or {}
        logger.info(f"Initializing MCP session with client: {client_info.get('name', 'unknown')}")

        return {
            "protocolVersion": params.get("protocolVersion") or PROTOCOL_VERSION,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info
        }

    async def handle_initialized(self, params: Dict[str, Any]) -> None:
        """Handle MCP initialized notification"""
        self.session_initialized = True
        logger.info("MCP session initialized successfully")

    async def handle_ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def handle_resources_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """List every guideline plus the combined and condensed views"""
        resources = [
            {
                "uri": guideline_uri(record.id),
                "name": record.title,
                "description": f"Guideline from {record.source_url}",
                "mimeType": "text/plain"
            }
            for record in self.store.records()
        ]
        resources.append({
            "uri": COMBINED_URI,
            "name": "All Guidelines (for code review)",
            "mimeType": "text/plain"
        })
        resources.append({
            "uri": CONDENSED_URI,
            "name": "Guidelines Context (condensed)",
            "mimeType": "text/plain"
        })
        return {"resources": resources}

    async def handle_resource_templates_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "resourceTemplates": [{
                "uriTemplate": "guideline://{id}",
                "name": "guideline",
                "mimeType": "text/plain"
            }]
        }

    async def handle_resources_read(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Read a guideline resource; unknown ids yield placeholder text"""
        uri = params.get("uri") or ""
        text = render_uri(self.store, uri)
        return {
            "contents": [{
                "uri": uri,
                "mimeType": "text/plain",
                "text": text
            }]
        }

    async def handle_prompts_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"prompts": PROMPTS}

    async def handle_prompts_get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Render a prompt template with the guideline corpus embedded"""
        name = params.get("name")
        arguments = params.get("arguments") or {}

        if name == "code-review":
            code = _required_argument(arguments, "code")
            text = (
                "Review the following code against the team guidelines. "
                "List every violation with the guideline it breaks and a fix.\n\n"
                f"GUIDELINES:\n{combined_view(self.store)}\n\n"
                f"CODE:\n{code}"
            )
            description = "Code review against all guidelines"
        elif name == "generate-code":
            task = _required_argument(arguments, "task")
            language = arguments.get("language")
            target = f" in {language}" if language else ""
            text = (
                f"Write code{target} for the following task. "
                "The code must follow every team guideline.\n\n"
                f"GUIDELINES:\n{combined_view(self.store)}\n\n"
                f"TASK:\n{task}"
            )
            description = "Guideline-compliant code generation"
        elif name == "explain-guideline":
            guideline_id = _required_argument(arguments, "id")
            text = (
                "Explain the following guideline, why teams adopt it, and give a "
                "compliant and a non-compliant example.\n\n"
                f"{single_view(self.store, guideline_id)}"
            )
            description = f"Explanation of guideline {guideline_id}"
        else:
            raise ValueError(f"Unknown prompt: {name}")

        return {
            "description": description,
            "messages": [{
                "role": "user",
                "content": {"type": "text", "text": text}
            }]
        }

    async def handle_tools_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": TOOLS}

    async def handle_tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Execute MCP tool calls"""
        name = params.get("name")
        arguments = params.get("arguments") or {}

        if name == "check_api_naming":
            return self._tool_check_api_naming(arguments)
        elif name == "ping":
            return self._tool_ping(arguments)
        elif name == "get_guideline":
            return self._tool_get_guideline(arguments)
        elif name == "reload_guidelines":
            return await self._tool_reload_guidelines(arguments)
        else:
            raise ValueError(f"Unknown tool: {name}")

    def _tool_check_api_naming(self, args: Dict[str, Any]) -> Dict[str, Any]:
        endpoint = str(args.get("endpoint") or "").strip()
        if not endpoint:
            return text_result("Error: No endpoint provided", is_error=True)

        result = check_endpoint_naming(endpoint)
        if result["compliant"]:
            return text_result(f"COMPLIANT: '{endpoint}' follows the kebab-case endpoint naming standard.")
        return text_result(
            f"VIOLATION: '{endpoint}' uses underscores. API endpoints must use kebab-case "
            f"(hyphens). Suggested: '{result['suggestion']}'"
        )

    def _tool_ping(self, args: Dict[str, Any]) -> Dict[str, Any]:
        message = args.get("message") or "pong"
        return text_result(f"{message} ({len(self.store)} guidelines loaded)")

    def _tool_get_guideline(self, args: Dict[str, Any]) -> Dict[str, Any]:
        guideline_id = str(args.get("id") or "").strip()
        if not guideline_id:
            return text_result("Error: No guideline id provided", is_error=True)
        record = self.store.get(guideline_id)
        if record is None:
            return text_result(single_view(self.store, guideline_id), is_error=True)
        return text_result(f"**{record.title}**\n\n{record.text}")

    async def _tool_reload_guidelines(self, args: Dict[str, Any]) -> Dict[str, Any]:
        if self.aggregator is None or not self.root_page_id:
            return text_result("Error: Reloading is not configured for this server", is_error=True)
        try:
            await self.aggregator.load(self.root_page_id)
        except Exception as e:
            logger.error(f"Guideline reload failed: {e}")
            return text_result(f"Error: Reload failed, keeping {len(self.store)} guidelines: {e}", is_error=True)

        report = self.aggregator.last_report
        failed = f", {len(report.failed)} pages failed" if report and report.failed else ""
        return text_result(f"Reloaded {len(self.store)} guidelines{failed}")

    async def handle_request(self, request_data: Any) -> Optional[Dict[str, Any]]:
        """Main request handler following JSON-RPC 2.0 spec"""
        if not isinstance(request_data, dict):
            return error_response(None, INVALID_REQUEST, "Invalid Request")

        if self.injector is not None:
            request_data = self.injector.inject(request_data)

        request_id = request_data.get("id")
        is_notification = "id" not in request_data

        try:
            # Validate JSON-RPC structure
            if request_data.get("jsonrpc") != "2.0":
                raise ValueError("Invalid JSON-RPC version")

            method = request_data.get("method")
            if not method or not isinstance(method, str):
                raise ValueError("Missing method")

            params = request_data.get("params") or {}
            if not isinstance(params, dict):
                raise ValueError("Params must be an object")

        except ValueError as e:
            return error_response(request_id, INVALID_REQUEST, str(e))

        try:
            if method in ("notifications/initialized", "initialized"):
                await self.handle_initialized(params)
                return None

            if method.startswith("notifications/"):
                logger.debug(f"Ignoring notification {method}")
                return None

            handler = self._handlers.get(method)
            if handler is None:
                raise MethodNotFound(f"Unknown method: {method}")

            result = await handler(params)

        except MethodNotFound as e:
            logger.warning(str(e))
            return None if is_notification else error_response(request_id, METHOD_NOT_FOUND, str(e))
        except ValueError as e:
            logger.warning(f"Invalid params for {method}: {e}")
            return None if is_notification else error_response(request_id, INVALID_PARAMS, str(e))
        except Exception as e:
            logger.exception(f"Error handling request {method}: {e}")
            return None if is_notification else error_response(request_id, INTERNAL_ERROR, str(e))

        if is_notification:
            return None

        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": result
        }


def error_response(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {
            "code": code,
            "message": message
        }
    }
