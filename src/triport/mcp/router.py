"""
Method Router — Dispatch MCP methods

Routes:
  initialize       -> server capabilities handshake
  initialized      -> notification (no response)
  tools/list       -> one tool per registered operation
  tools/call       -> Dispatcher.execute
  ping             -> pong

Tool failures never become JSON-RPC errors: they come back as tool content
wrapping the uniform error JSON, with isError set.
"""

import uuid
from typing import Any, Dict, List, Optional

from triport.config import Config
from triport.core.dispatch import Dispatcher
from triport.core.errors import to_triport_error
from triport.core.operation import RuntimeContext
from triport.core.registry import ListingContext, OperationRegistry
from triport.logger import get_logger
from triport.mcp.protocol import (
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    ProtocolError,
    initialize_result,
    json_tool_result,
    tool_definition,
    tools_list_result,
)

log = get_logger("mcp.router")


class Router:
    """MCP method dispatcher backed by an operation registry."""

    def __init__(self, registry: OperationRegistry, dispatcher: Optional[Dispatcher] = None):
        self._registry = registry
        self._dispatcher = dispatcher or Dispatcher(registry)
        self._initialized = False
        self.session_id = uuid.uuid4().hex

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def route(self, msg: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Route a validated message to the appropriate handler.
        Returns the result payload or None for notifications.
        """
        method = msg.get("method", "")
        params = msg.get("params") or {}

        if method == "initialize":
            return self._handle_initialize(params)

        if method in ("initialized", "notifications/initialized"):
            self._initialized = True
            return None

        if method.startswith("notifications/"):
            return None

        if method == "ping":
            return {}

        if method == "tools/list":
            return tools_list_result(self.tool_definitions())

        if method == "tools/call":
            return await self._handle_tools_call(params)

        raise ProtocolError(METHOD_NOT_FOUND, f"Unknown method: {method}")

    def _handle_initialize(self, params: Dict) -> Dict[str, Any]:
        log.info(
            f"Client initialize: {params.get('clientInfo', {}).get('name', '?')} "
            f"protocol={params.get('protocolVersion', '?')}"
        )
        return initialize_result(
            server_name=Config.APP_NAME,
            server_version=Config.APP_VERSION,
            protocol_version=Config.PROTOCOL_VERSION,
            instructions=Config.APP_DESCRIPTION,
        )

    def tool_definitions(self) -> List[Dict[str, Any]]:
        operations = self._registry.list_enriched(
            ListingContext(transport="mcp", session_id=self.session_id)
        )
        return [
            tool_definition(op.name, op.title, op.input.json_schema())
            for op in operations
        ]

    async def _handle_tools_call(self, params: Dict) -> Dict[str, Any]:
        if not isinstance(params, dict):
            raise ProtocolError(INVALID_PARAMS, "tools/call params must be an object")
        name = params.get("name", "")
        args = params.get("arguments")
        if args is None:
            args = {}

        if not name:
            raise ProtocolError(INVALID_PARAMS, "Missing tool name")

        context = RuntimeContext(request_id=str(uuid.uuid4()), transport="mcp")
        try:
            output = await self._dispatcher.execute(name, args, context)
        except Exception as exc:
            error = to_triport_error(exc)
            log.info(f"Tool {name} failed: {error.code}")
            return json_tool_result(error.to_dict(), is_error=True)

        return json_tool_result(output)

    @property
    def tool_count(self) -> int:
        return len(self._registry)
