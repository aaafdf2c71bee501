"""Triport — define an operation once, call it over REST, MCP or the command line."""

__version__ = "0.1.0"

from triport.core.errors import (  # noqa: E402
    ConfigurationError,
    InternalServerError,
    NotFoundError,
    TriportError,
    ValidationError,
    is_triport_error,
    to_triport_error,
)
from triport.core.operation import Invocation, Operation, RuntimeContext, make_operation  # noqa: E402
from triport.core.schema import Schema  # noqa: E402
from triport.core.registry import ListingContext, OperationRegistry  # noqa: E402
from triport.core.dispatch import Dispatcher  # noqa: E402

__all__ = [
    "__version__",
    "ConfigurationError",
    "Dispatcher",
    "InternalServerError",
    "Invocation",
    "ListingContext",
    "NotFoundError",
    "Operation",
    "OperationRegistry",
    "RuntimeContext",
    "Schema",
    "TriportError",
    "ValidationError",
    "is_triport_error",
    "make_operation",
    "to_triport_error",
]
