"""
Built-in operations

Modules:
  text_ops  — echo, uppercase, process
"""

from triport.core.registry import OperationRegistry
from triport.operations import text_ops

ALL_OPERATIONS = list(text_ops.OPERATIONS)


def create_default_registry() -> OperationRegistry:
    """A fresh registry holding every built-in operation."""
    registry = OperationRegistry()
    for operation in ALL_OPERATIONS:
        registry.register(operation)
    return registry
