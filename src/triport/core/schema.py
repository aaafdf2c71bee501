"""Schema wrapper around pydantic's TypeAdapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class SafeValidation(Generic[T]):
    """Outcome of Schema.safe_validate — never raised, always returned."""

    success: bool
    data: Optional[T] = None
    issues: List[Dict[str, Any]] = field(default_factory=list)


def format_issues(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    """Flatten a pydantic error into JSON-safe, field-level issues."""
    return [
        {
            "path": list(err.get("loc", ())),
            "message": err.get("msg", ""),
            "code": err.get("type", "invalid"),
        }
        for err in exc.errors(include_url=False)
    ]


class Schema(Generic[T]):
    """
    Validates untyped data against a python type.

    Accepts pydantic models and anything else pydantic knows how to validate
    (``str``, ``list[int]``, ``TypedDict``...).
    """

    def __init__(self, tp: Any):
        self.type = tp
        self._adapter: TypeAdapter[T] = TypeAdapter(tp)

    @classmethod
    def of(cls, value: Any) -> "Schema[Any]":
        return value if isinstance(value, Schema) else cls(value)

    def validate(self, data: Any, strict: bool = False) -> T:
        """Validate or raise pydantic.ValidationError. ``strict`` disables type coercion."""
        return self._adapter.validate_python(data, strict=strict)

    def safe_validate(self, data: Any, strict: bool = False) -> SafeValidation[T]:
        try:
            value = self._adapter.validate_python(data, strict=strict)
        except PydanticValidationError as exc:
            return SafeValidation(success=False, issues=format_issues(exc))
        return SafeValidation(success=True, data=value)

    def dump(self, value: T) -> Any:
        """JSON-compatible rendition of a validated value."""
        return self._adapter.dump_python(value, mode="json")

    def json_schema(self) -> Dict[str, Any]:
        return self._adapter.json_schema()

    def __repr__(self) -> str:
        return f"Schema({getattr(self.type, '__name__', self.type)!r})"
