"""
Dispatch Pipeline — the single path every transport goes through

    lookup -> validate input -> run handler -> validate output -> return

Every failure leaves as a TriportError, so REST, MCP and the CLI all see the
same validation rules, error kinds and success shapes.
"""

import inspect
import time
from typing import Any, Optional

from triport.core.errors import (
    InternalServerError,
    NotFoundError,
    TriportError,
    ValidationError,
    to_triport_error,
)
from triport.core.operation import Invocation, RuntimeContext
from triport.core.registry import OperationRegistry
from triport.logger import get_logger

log = get_logger("dispatch")


def _json_safe(value: Any) -> Any:
    """Best-effort JSON-compatible copy of an arbitrary handler result."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    model_dump = getattr(value, "model_dump", None)
    if callable(model_dump):
        try:
            return _json_safe(model_dump(mode="json"))
        except Exception:
            return repr(value)
    return repr(value)


class Dispatcher:
    """Runs operations from a registry."""

    def __init__(self, registry: OperationRegistry):
        self.registry = registry

    async def execute(self, name: str, raw_input: Any, context: Optional[RuntimeContext] = None) -> Any:
        """
        Execute an operation by name.
        Returns the validated, JSON-compatible output or raises a TriportError.
        """
        context = context or RuntimeContext()
        started = time.perf_counter()
        try:
            output = await self._run(name, raw_input, context)
        except TriportError as exc:
            self._log_failure(name, context, exc)
            raise

        latency_ms = int((time.perf_counter() - started) * 1000)
        log.debug(
            f"Executed {name} via {context.transport or '?'} "
            f"request_id={context.request_id} latency_ms={latency_ms}"
        )
        return output

    async def _run(self, name: str, raw_input: Any, context: RuntimeContext) -> Any:
        operation = self.registry.get(name)
        if operation is None:
            raise NotFoundError(name)

        parsed = operation.input.safe_validate(raw_input)
        if not parsed.success:
            raise ValidationError("Invalid endpoint input", {
                "endpoint": name,
                "issues": parsed.issues,
            })

        try:
            result = operation.handler(Invocation(input=parsed.data, config=context))
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            error = to_triport_error(exc)
            if error is not exc:
                raise error from exc
            raise

        # Strict: a handler that breaks its output contract is not coerced into it
        checked = operation.output.safe_validate(result, strict=True)
        if not checked.success:
            raise InternalServerError("Endpoint output failed validation", {
                "endpoint": name,
                "result": _json_safe(result),
                "issues": checked.issues,
            })

        return operation.output.dump(checked.data)

    def _log_failure(self, name: str, context: RuntimeContext, exc: TriportError):
        summary = (
            f"{name} failed via {context.transport or '?'} "
            f"request_id={context.request_id}: {exc.code} {exc.message}"
        )
        if exc.is_client_error:
            log.warning(summary)
        else:
            log.error(f"{summary} details={exc.details!r}", exc_info=exc)
