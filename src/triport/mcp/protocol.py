"""
JSON-RPC 2.0 Protocol — MCP message construction and validation

Handles:
- Request/response/notification/error construction
- Message validation
- Tool result rendering for operation outputs and uniform errors
"""

import json
from typing import Any, Dict, List, Optional, Union

JSONRPC_VERSION = "2.0"

TOOLS_LIST_CHANGED = "notifications/tools/list_changed"


class ProtocolError(Exception):
    """JSON-RPC protocol error"""
    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def validate_message(msg: Dict[str, Any]) -> str:
    """
    Validate a JSON-RPC 2.0 message.
    Returns message type: 'request', 'notification', 'response', 'error', or raises ProtocolError.
    """
    if not isinstance(msg, dict):
        raise ProtocolError(INVALID_REQUEST, "Message must be a JSON object")

    if msg.get("jsonrpc") != JSONRPC_VERSION:
        raise ProtocolError(INVALID_REQUEST, f"Expected jsonrpc={JSONRPC_VERSION}")

    has_id = "id" in msg
    if "method" in msg:
        return "request" if has_id else "notification"
    if "result" in msg and has_id:
        return "response"
    if "error" in msg and has_id:
        return "error"
    raise ProtocolError(INVALID_REQUEST, "Cannot determine message type")


def make_response(request_id: Union[int, str], result: Any) -> Dict[str, Any]:
    """Build a JSON-RPC success response."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": result,
    }


def make_error(
    request_id: Optional[Union[int, str]],
    code: int,
    message: str,
    data: Any = None,
) -> Dict[str, Any]:
    """Build a JSON-RPC error response."""
    error = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error,
    }


def make_notification(method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build a JSON-RPC notification (no id, no response expected)."""
    msg = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        msg["params"] = params
    return msg


# --- MCP-specific message builders ---

def initialize_result(
    server_name: str,
    server_version: str,
    protocol_version: str,
    instructions: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the MCP initialize result."""
    result = {
        "protocolVersion": protocol_version,
        "capabilities": {
            "tools": {"listChanged": True},
        },
        "serverInfo": {
            "name": server_name,
            "version": server_version,
        },
    }
    if instructions:
        result["instructions"] = instructions
    return result


def tool_definition(name: str, description: str, input_schema: Dict[str, Any]) -> Dict[str, Any]:
    """Build one entry of the tools/list result."""
    return {
        "name": name,
        "description": description,
        "inputSchema": input_schema,
    }


def tools_list_result(tools: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Build the MCP tools/list result."""
    return {"tools": tools}


def tool_result_content(
    content: List[Dict[str, Any]],
    is_error: bool = False,
) -> Dict[str, Any]:
    """Build the MCP tools/call result."""
    result = {"content": content}
    if is_error:
        result["isError"] = True
    return result


def text_content(text: str) -> Dict[str, Any]:
    """Build a text content block."""
    return {"type": "text", "text": text}


def json_tool_result(payload: Any, is_error: bool = False) -> Dict[str, Any]:
    """Wrap a JSON payload (operation output or uniform error) as tool content."""
    return tool_result_content(
        [text_content(json.dumps(payload, indent=2))],
        is_error=is_error,
    )
