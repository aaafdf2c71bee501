"""
MCP Server — Main Orchestrator

Ties together:
  Transport -> Protocol -> Router -> Dispatcher -> Registry

Flow:
  1. Transport reads one line from stdin
  2. Protocol validates JSON-RPC 2.0
  3. Router dispatches to the matching handler
  4. Transport writes the response to stdout

Registry changes (signal_changed) are pushed to the client as
notifications/tools/list_changed once the handshake is complete.
"""

import asyncio
import signal
from typing import Any, Dict, List, Optional, Set

from triport.config import Config
from triport.core.registry import OperationRegistry
from triport.logger import get_logger
from triport.mcp.protocol import (
    INTERNAL_ERROR,
    PARSE_ERROR,
    TOOLS_LIST_CHANGED,
    ProtocolError,
    make_error,
    make_notification,
    make_response,
    validate_message,
)
from triport.mcp.router import Router
from triport.mcp.transport import MALFORMED, StdioTransport

log = get_logger("mcp.server")


class MCPServer:
    """
    Main server orchestrator.

    Usage:
        server = MCPServer(registry)
        await server.run()
    """

    def __init__(self, registry: OperationRegistry, transport=None):
        self._registry = registry
        self._transport = transport or StdioTransport()
        self._router = Router(registry)
        self._running = False
        self._unsubscribe = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Set[asyncio.Task] = set()
        self._signals: List[int] = []

    @property
    def router(self) -> Router:
        return self._router

    # -- change notification --

    def _on_registry_changed(self):
        """Registry listener: schedule a list_changed push on the server loop."""
        if self._loop is None or self._loop.is_closed() or not self._router.initialized:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._schedule_list_changed()
        else:
            self._loop.call_soon_threadsafe(self._schedule_list_changed)

    def _schedule_list_changed(self):
        task = self._loop.create_task(
            self._transport.write_message(make_notification(TOOLS_LIST_CHANGED))
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # -- main loop --

    async def run(self):
        """Start the server and process messages until EOF or signal."""
        log.info(f"Starting {Config.APP_NAME} MCP server v{Config.APP_VERSION}")

        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self._registry.on_changed(self._on_registry_changed)
        await self._transport.start()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                self._loop.add_signal_handler(sig, lambda: asyncio.create_task(self.shutdown()))
                self._signals.append(sig)
            except (NotImplementedError, RuntimeError):
                pass

        self._running = True
        log.info(f"Server ready — tools={self._router.tool_count}")

        try:
            while self._running:
                msg = await self._transport.read_message()
                if msg is None:
                    log.info("EOF on stdin — shutting down")
                    break
                if msg is MALFORMED:
                    await self._transport.write_message(make_error(None, PARSE_ERROR, "Parse error"))
                    continue
                await self.handle_message(msg)

        except asyncio.CancelledError:
            log.info("Server cancelled")
        finally:
            await self.shutdown()

    async def handle_message(self, msg: Dict[str, Any]):
        """Process a single JSON-RPC message and write the response, if any."""
        response = await self.process_message(msg)
        if response is not None:
            await self._transport.write_message(response)

    async def process_message(self, msg: Any) -> Optional[Dict[str, Any]]:
        """Turn one incoming message into its response (None for notifications)."""
        request_id = msg.get("id") if isinstance(msg, dict) else None
        is_notification = isinstance(msg, dict) and "method" in msg and "id" not in msg

        try:
            msg_type = validate_message(msg)
            if msg_type in ("response", "error"):
                return None

            result = await self._router.route(msg)
            if msg_type == "notification" or result is None:
                return None
            return make_response(request_id, result)

        except ProtocolError as exc:
            log.warning(f"Protocol error: {exc.message} (code={exc.code})")
            if is_notification:
                return None
            return make_error(request_id, exc.code, exc.message, exc.data)

        except Exception as exc:
            log.error(f"Unhandled error: {exc}", exc_info=True)
            if is_notification:
                return None
            return make_error(request_id, INTERNAL_ERROR, "Internal error")

    async def shutdown(self):
        """Graceful shutdown — unsubscribe from the registry, close the transport."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        while self._signals:
            self._loop.remove_signal_handler(self._signals.pop())
        if not self._running:
            return
        self._running = False

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

        await self._transport.close()
        log.info("Server stopped")
