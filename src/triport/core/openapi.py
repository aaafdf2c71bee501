"""OpenAPI 3.0.3 document for the POST /rpc/{name} routes."""

from typing import Any, Dict, Iterable, Optional

from triport.core.operation import Operation

ERROR_COMPONENT = {
    "type": "object",
    "required": ["error"],
    "properties": {
        "error": {
            "type": "object",
            "required": ["name", "code", "message"],
            "properties": {
                "name": {"type": "string"},
                "code": {"type": "string"},
                "message": {"type": "string"},
                "details": {},
            },
        },
    },
}

_ERROR_RESPONSES = {
    "400": "Input failed validation",
    "404": "No operation with this name",
    "500": "Operation failed or broke its output contract",
}


def _json_content(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"application/json": {"schema": schema}}


def _path_item(operation: Operation) -> Dict[str, Any]:
    post: Dict[str, Any] = {
        "summary": operation.summary,
        "operationId": operation.name,
        "requestBody": {
            "required": True,
            "content": _json_content(operation.input.json_schema()),
        },
        "responses": {
            "200": {
                "description": "Successful response",
                "content": _json_content(operation.output.json_schema()),
            },
        },
    }
    if operation.description:
        post["description"] = operation.description
    for status, description in _ERROR_RESPONSES.items():
        post["responses"][status] = {
            "description": description,
            "content": _json_content({"$ref": "#/components/schemas/Error"}),
        }
    return {"post": post}


def build_openapi_document(
    operations: Iterable[Operation],
    title: str,
    version: str,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the OpenAPI document describing one RPC route per operation."""
    info: Dict[str, Any] = {"title": title, "version": version}
    if description:
        info["description"] = description

    return {
        "openapi": "3.0.3",
        "info": info,
        "paths": {f"/rpc/{op.name}": _path_item(op) for op in operations},
        "components": {"schemas": {"Error": ERROR_COMPONENT}},
    }
