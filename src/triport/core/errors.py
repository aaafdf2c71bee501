"""
Error taxonomy shared by every call surface.

Four kinds, one wire shape:

    {"error": {"name": ..., "code": ..., "message": ..., "details": ...}}

ValidationError and NotFound are client errors (the caller can fix the input
or the operation name). InternalServerError and ConfigurationError are server
errors; callers only ever see what the thrower put in ``details``.
"""

from typing import Any, Dict, Optional

CLIENT = "client"
SERVER = "server"


class TriportError(Exception):
    """Base class for every error that may cross an adapter boundary."""

    name = "TriportError"
    code = "TRIPORT_ERROR"
    severity = SERVER
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if code is not None:
            self.code = code

    @property
    def is_client_error(self) -> bool:
        return self.severity == CLIENT

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the uniform error body."""
        error: Dict[str, Any] = {
            "name": self.name,
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(TriportError):
    """Input (or CLI arguments) failed schema validation."""

    name = "ValidationError"
    code = "VALIDATION_ERROR"
    severity = CLIENT
    status_code = 400


class NotFoundError(TriportError):
    """No operation is registered under the requested name."""

    name = "NotFound"
    code = "ENDPOINT_NOT_FOUND"
    severity = CLIENT
    status_code = 404

    def __init__(self, endpoint_name: str, message: Optional[str] = None,
                 details: Optional[Any] = None, *, code: Optional[str] = None):
        super().__init__(
            message or f"Endpoint '{endpoint_name}' not found",
            details if details is not None else {"endpointName": endpoint_name},
            code=code,
        )
        self.endpoint_name = endpoint_name


class InternalServerError(TriportError):
    """Unexpected failure, or an operation broke its own output contract."""

    name = "InternalServerError"
    code = "INTERNAL_SERVER_ERROR"
    severity = SERVER
    status_code = 500

    def __init__(self, message: str = "An internal server error occurred",
                 details: Optional[Any] = None, *, code: Optional[str] = None):
        super().__init__(message, details, code=code)


class ConfigurationError(TriportError):
    """Invalid startup configuration or an invalid operation definition."""

    name = "ConfigurationError"
    code = "CONFIGURATION_ERROR"
    severity = SERVER
    status_code = 500


def is_triport_error(value: Any) -> bool:
    return isinstance(value, TriportError)


def to_triport_error(value: Any) -> TriportError:
    """
    Normalize anything that was raised (or handed over as a failure) into the taxonomy.

    Taxonomy errors pass through unchanged. Other exceptions become
    InternalServerError carrying the original class name and message; any
    other value becomes InternalServerError carrying its repr.
    """
    if isinstance(value, TriportError):
        return value

    if isinstance(value, BaseException):
        original = str(value)
        return InternalServerError(
            original or "An internal server error occurred",
            {"originalError": type(value).__name__, "originalMessage": original},
        )

    return InternalServerError("An unknown error occurred", {"error": repr(value)})
