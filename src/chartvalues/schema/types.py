"""Schema node and validation result types.

A schema tree mirrors the shape of the values it validates:

    {
        "replicas": {"type": "number", "minimum": 1, "required": True},
        "image": {
            "type": "object",
            "properties": {"tag": {"type": "string", "pattern": "^[0-9.]+$"}},
        },
    }

Each node is a SchemaNode. Unknown keys are kept (`extra="allow"`) so
schemas written for other tools still load; use `collect_all_extra_fields()`
to audit them.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import typing as _typing

import pydantic as _pydantic

import chartvalues.errors as errors
import chartvalues.values as values

SchemaKind: _typing.TypeAlias = _typing.Literal["string", "number", "boolean", "array", "object"]


class SchemaNode(_pydantic.BaseModel):
    """
    Declared type and constraints for one path.

    YAML/JSON key `type` populates `kind`.
    """

    model_config = _pydantic.ConfigDict(extra="allow", populate_by_name=True)

    kind: SchemaKind | None = _pydantic.Field(default=None, alias="type")
    """Expected value kind. None skips the type check."""

    description: str | None = None
    """Human-readable description (forms show it as help text)."""

    default: _typing.Any = None
    """Documented default. Not applied by the validator."""

    required: bool = False
    """Whether an absent or null value is an error."""

    enum: list[_typing.Any] | None = None
    """Allowed values."""

    minimum: int | float | None = None
    """Inclusive lower bound for numbers."""

    maximum: int | float | None = None
    """Inclusive upper bound for numbers."""

    pattern: str | None = None
    """Regular expression that strings must contain a match for."""

    items: SchemaNode | None = None
    """Schema for every element of an array."""

    properties: dict[str, SchemaNode] | None = None
    """Schemas for the declared keys of an object."""

    examples: list[_typing.Any] | None = None
    """Example values (documentation only)."""

    def child(self, key: str) -> SchemaNode | None:
        """Return the declared property schema for a key, if any."""
        if not self.properties:
            return None
        return self.properties.get(key)

    def collect_all_extra_fields(self, prefix: str = "") -> dict[str, _typing.Any]:
        """
        Recursively collect unrecognized schema keys.

        Returns a flat dict keyed by dotted path, e.g.:
            {"image.tag.minLength": 1}
        """
        result: dict[str, _typing.Any] = {}
        for key, value in (self.model_extra or {}).items():
            result[values.join_path(prefix, key)] = value
        if self.items is not None:
            result.update(self.items.collect_all_extra_fields(f"{prefix}[]"))
        for key, node in (self.properties or {}).items():
            result.update(node.collect_all_extra_fields(values.join_path(prefix, key)))
        return result


SchemaNode.model_rebuild()

SchemaTree: _typing.TypeAlias = dict[str, SchemaNode]


def coerce_schema(schema: _abc.Mapping[str, _typing.Any]) -> SchemaTree:
    """
    Convert a raw schema document into SchemaNodes.

    Values that are already SchemaNode instances are kept as-is.

    Raises:
        SchemaError: If any node fails pydantic validation.
    """
    tree: SchemaTree = {}
    for key, node in schema.items():
        if isinstance(node, SchemaNode):
            tree[str(key)] = node
            continue
        try:
            tree[str(key)] = SchemaNode.model_validate(node)
        except _pydantic.ValidationError as e:
            raise errors.SchemaError(f"Invalid schema for '{key}': {e}") from e
    return tree


@_dataclasses.dataclass(frozen=True, slots=True)
class ValidationError:
    """
    One offending path.

    Returned as data by the validator, never raised.
    """

    path: str
    message: str
    value: _typing.Any
    schema: SchemaNode

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "path": self.path,
            "message": self.message,
            "value": self.value,
            "schema": self.schema.model_dump(by_alias=True, exclude_none=True),
        }
