"""
Operation descriptors — the unit of registration.

An operation is defined once and served by every transport:

    echo = make_operation(
        name="echo",
        summary="Echo a message back to the caller",
        input=EchoInput,
        output=EchoOutput,
        handler=lambda call: {"echoed": call.input.message},
    )

``make_operation`` is typed against the input/output schemas so handlers are
checked at the call site; the resulting ``Operation`` stores type-erased
schemas so a registry can hold heterogeneous operations side by side.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Type, TypeVar, Union

from triport.core.errors import ConfigurationError
from triport.core.schema import Schema

InT = TypeVar("InT")
OutT = TypeVar("OutT")


@dataclass(frozen=True)
class RuntimeContext:
    """Per-call context, created fresh by the adapter for every invocation."""

    request_id: Optional[str] = None
    transport: Optional[str] = None


@dataclass(frozen=True)
class Invocation(Generic[InT]):
    """What a handler receives: the validated input and the runtime context."""

    input: InT
    config: RuntimeContext


Handler = Callable[[Invocation[Any]], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class Operation:
    name: str
    summary: str
    input: Schema[Any]
    output: Schema[Any]
    handler: Handler
    description: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError("Operation name must be a non-empty string", {"name": repr(self.name)})
        if not isinstance(self.summary, str):
            raise ConfigurationError("Operation summary must be a string", {"endpointName": self.name})
        if self.description is not None and not isinstance(self.description, str):
            raise ConfigurationError("Operation description must be a string", {"endpointName": self.name})
        if not isinstance(self.input, Schema) or not isinstance(self.output, Schema):
            raise ConfigurationError("Operation input and output must be schemas", {"endpointName": self.name})
        if not callable(self.handler):
            raise ConfigurationError("Operation handler must be callable", {"endpointName": self.name})

    @property
    def title(self) -> str:
        """Description when present, otherwise the summary."""
        return self.description or self.summary


def make_operation(
    *,
    name: str,
    summary: str,
    input: Union[Type[InT], Schema[InT]],
    output: Union[Type[OutT], Schema[OutT]],
    handler: Callable[[Invocation[InT]], Union[OutT, Awaitable[OutT], Any]],
    description: Optional[str] = None,
) -> Operation:
    """Build an Operation; raises ConfigurationError on an invalid definition."""
    return Operation(
        name=name,
        summary=summary,
        description=description,
        input=Schema.of(input),
        output=Schema.of(output),
        handler=handler,
    )
