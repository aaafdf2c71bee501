"""Triport MCP Server — raw JSON-RPC over stdio."""

from triport.mcp.router import Router
from triport.mcp.server import MCPServer
from triport.mcp.transport import StdioTransport

__all__ = ["MCPServer", "Router", "StdioTransport"]
