"""
REST adapter — FastAPI application exposing the registry over HTTP

Routes:
  POST /rpc/{name}  -> Dispatcher.execute, 200 + output or uniform error JSON
  GET  /tools       -> operation listing with ETag / If-None-Match support
  GET  /health      -> liveness probe
  GET  /docs/json   -> OpenAPI document for the RPC routes
  GET  /docs        -> Swagger UI
"""

import json
import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import JSONResponse, Response

from triport.config import Config
from triport.core.dispatch import Dispatcher
from triport.core.errors import NotFoundError, TriportError, ValidationError, to_triport_error
from triport.core.openapi import build_openapi_document
from triport.core.operation import RuntimeContext
from triport.core.registry import ListingContext, OperationRegistry
from triport.logger import get_logger

log = get_logger("rest")

REQUEST_ID_HEADER = "x-request-id"


def _resolve_request_id(request: Request) -> str:
    return request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())


def error_response(error: TriportError, request_id: str = None) -> JSONResponse:
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(error.to_dict(), status_code=error.status_code, headers=headers)


async def _read_json_body(request: Request) -> Any:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ValidationError("Request body is not valid JSON", {"cause": str(exc)}) from exc


async def _handle_triport_error(request: Request, exc: TriportError) -> JSONResponse:
    return error_response(exc)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(to_triport_error(exc))


async def _handle_route_not_found(request: Request, exc: Exception) -> JSONResponse:
    log.warning(f"Route not found: {request.method} {request.url.path}")
    error = NotFoundError(
        request.url.path,
        message=f"Route {request.method} {request.url.path} not found",
        details={"method": request.method, "path": request.url.path},
        code="ROUTE_NOT_FOUND",
    )
    return error_response(error)


def create_app(registry: OperationRegistry, config=Config) -> FastAPI:
    """Build the FastAPI application serving ``registry``."""
    if registry is None:
        raise ValueError("registry is required")

    dispatcher = Dispatcher(registry)

    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        description=config.APP_DESCRIPTION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        exception_handlers={
            TriportError: _handle_triport_error,
            404: _handle_route_not_found,
            Exception: _handle_unexpected_error,
        },
    )

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/tools")
    async def list_tools(request: Request) -> Response:
        etag = registry.etag
        headers = {"ETag": etag, "Cache-Control": "no-cache"}
        if request.headers.get("if-none-match") == etag:
            return Response(status_code=304, headers=headers)

        try:
            operations = registry.list_enriched(
                ListingContext(transport="rest", session_id=request.headers.get(REQUEST_ID_HEADER))
            )
        except Exception as exc:
            log.error(f"Listing operations failed: {exc}", exc_info=True)
            return error_response(to_triport_error(exc))
        listing = [
            {"name": op.name, "summary": op.summary, "description": op.description}
            for op in operations
        ]
        return JSONResponse(listing, headers=headers)

    @app.post("/rpc/{name}")
    async def call_operation(name: str, request: Request) -> Response:
        request_id = _resolve_request_id(request)
        try:
            raw_input = await _read_json_body(request)
            output = await dispatcher.execute(
                name, raw_input, RuntimeContext(request_id=request_id, transport="rest")
            )
        except Exception as exc:
            return error_response(to_triport_error(exc), request_id)

        return JSONResponse(output, headers={REQUEST_ID_HEADER: request_id})

    @app.get("/docs/json")
    async def openapi_document() -> Response:
        try:
            document = build_openapi_document(
                registry.list(),
                title=config.APP_NAME,
                version=config.APP_VERSION,
                description=config.APP_DESCRIPTION,
            )
        except Exception as exc:
            log.error(f"Building the OpenAPI document failed: {exc}", exc_info=True)
            return error_response(to_triport_error(exc))
        return JSONResponse(document)

    @app.get("/docs")
    async def swagger_ui() -> Response:
        return get_swagger_ui_html(openapi_url="/docs/json", title=f"{config.APP_NAME} — API docs")

    log.info(f"REST app created — operations={registry.names()}")
    return app


def serve(registry: OperationRegistry, host: str = None, port: int = None):
    """Run the REST app under uvicorn (blocking)."""
    import uvicorn

    Config.validate()
    app = create_app(registry)
    uvicorn.run(
        app,
        host=host or Config.REST_HOST,
        port=port or Config.rest_port(),
        log_level=Config.LOG_LEVEL.lower(),
    )
