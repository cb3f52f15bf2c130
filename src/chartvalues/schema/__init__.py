"""
Schema types and validation for value trees.
"""

from chartvalues.schema.types import (
    SchemaKind,
    SchemaNode,
    SchemaTree,
    ValidationError,
    coerce_schema,
)
from chartvalues.schema.validator import is_kind_valid, validate, validate_path

__all__ = [
    "SchemaKind",
    "SchemaNode",
    "SchemaTree",
    "ValidationError",
    "coerce_schema",
    "is_kind_valid",
    "validate",
    "validate_path",
]
