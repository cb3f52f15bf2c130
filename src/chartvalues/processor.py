"""
ValuesProcessor: one editing session over a chart's values.

A processor owns three trees:
- default values: the chart's baseline, held by reference and never written
- user values: the overrides, the only tree mutated after construction
- schema: optional per-path declarations used for validation

Merged values are recomputed on every call (defaults deep-merged with user
values), so reads always reflect the latest edits.

Example:
    >>> processor = ValuesProcessor({"replicas": 1, "image": {"tag": "latest"}})
    >>> processor.set_value("image.tag", "1.2.3")
    >>> processor.get_merged_values()
    {'replicas': 1, 'image': {'tag': '1.2.3'}}
    >>> processor.is_value_modified("replicas")
    False
"""

from __future__ import annotations

import collections.abc as _abc
import copy as _copy
import dataclasses as _dataclasses
import json as _json
import logging as _logging
import typing as _typing

import chartvalues.config as config
import chartvalues.diff as diff
import chartvalues.errors as errors
import chartvalues.schema as schema
import chartvalues.serialization as serialization
import chartvalues.values as values

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass
class ProcessedValues:
    """Result of ValuesProcessor.process()."""

    values: dict[str, _typing.Any]
    schema: schema.SchemaTree | None
    errors: list[schema.ValidationError]
    warnings: list[str]
    processed: bool = True


@_dataclasses.dataclass(frozen=True)
class ValuesSummary:
    """Counts describing a processor's current state."""

    total_values: int
    user_modified_values: int
    validation_errors: int
    is_valid: bool
    has_user_values: bool
    has_schema: bool

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to a plain dict."""
        return _dataclasses.asdict(self)


def _is_under(path: str, prefix: str) -> bool:
    """Segment-aware prefix test: "image" covers "image.tag" and "image[0]"."""
    return path == prefix or path.startswith(prefix + ".") or path.startswith(prefix + "[")


def _delete_and_prune(tree: dict[str, _typing.Any], cursor: values.Cursor) -> None:
    """Delete a path, then drop ancestors that the delete left empty."""
    if not values.contains(tree, cursor):
        return
    values.delete(tree, cursor)
    for depth in range(len(cursor) - 1, 0, -1):
        parent = values.resolve(tree, cursor[:depth])
        if not isinstance(parent, dict) or parent:
            break
        values.delete(tree, cursor[:depth])


class ValuesProcessor:
    """
    Merge, validate, diff and serialize a chart's values.

    Not thread-safe: callers serialize mutation of one instance. Use clone()
    to edit independent drafts derived from the same defaults.
    """

    _schema: schema.SchemaTree | None

    def __init__(
        self,
        default_values: _abc.Mapping[str, _typing.Any] | None = None,
        schema: _abc.Mapping[str, _typing.Any] | None = None,
        *,
        settings: config.Settings | None = None,
    ) -> None:
        """
        Create a processor for one editing session.

        Args:
            default_values: Baseline tree. Held by reference, never modified.
            schema: Optional schema, key -> SchemaNode or raw dict.
            settings: Serializer/validation settings. Section defaults are
                used when omitted.

        Raises:
            SchemaError: If the schema cannot be read into schema nodes.
        """
        self._default_values: _abc.Mapping[str, _typing.Any] = (
            default_values if default_values is not None else {}
        )
        self._user_values: dict[str, _typing.Any] = {}
        self._schema = None
        self._settings = settings
        self._serializer = settings.serializer if settings else config.SerializerConfig()
        self._validation = settings.validation if settings else config.ValidationConfig()
        if schema is not None:
            self.set_schema(schema)

    # =========================================================================
    # Value management
    # =========================================================================

    def set_user_values(self, user_values: _abc.Mapping[str, _typing.Any]) -> None:
        """Replace all user overrides with a copy of the given tree."""
        self._user_values = _copy.deepcopy(dict(user_values))

    def get_user_values(self) -> dict[str, _typing.Any]:
        """Return a copy of the user overrides."""
        return _copy.deepcopy(self._user_values)

    def get_default_values(self) -> dict[str, _typing.Any]:
        """Return a copy of the default values."""
        return _copy.deepcopy(dict(self._default_values))

    def get_merged_values(self) -> dict[str, _typing.Any]:
        """Return defaults deep-merged with user values (a fresh tree)."""
        merged: dict[str, _typing.Any] = values.merge(dict(self._default_values), self._user_values)
        return _copy.deepcopy(merged)

    def get_value(self, path: str, default: _typing.Any = None) -> _typing.Any:
        """Return the effective (merged) value at a path."""
        return values.get(self.get_merged_values(), path, default)

    def set_value(self, path: str, value: _typing.Any) -> None:
        """Override the value at a path."""
        values.set(self._user_values, path, _copy.deepcopy(value))

    def remove_value(self, path: str) -> None:
        """Remove the override at a path; the default shows through again."""
        _delete_and_prune(self._user_values, values.parse_path(path))

    def is_value_modified(self, path: str) -> bool:
        """Check whether the effective value at a path differs from the default."""
        default = values.get(self._default_values, path, values.MISSING)
        merged = values.get(self.get_merged_values(), path, values.MISSING)
        return not values.equal(default, merged)

    def reset_value(self, path: str) -> None:
        """Reset one path to its default."""
        _logger.debug("Resetting value at %s", path)
        self.remove_value(path)

    def reset_all_values(self) -> None:
        """Discard every user override."""
        _logger.debug("Resetting all user values")
        self._user_values = {}

    # =========================================================================
    # Schema
    # =========================================================================

    def set_schema(self, schema_tree: _abc.Mapping[str, _typing.Any] | None) -> None:
        """
        Replace the schema (None removes it).

        Raises:
            SchemaError: If the schema cannot be read into schema nodes.
        """
        self._schema = schema.coerce_schema(schema_tree) if schema_tree is not None else None
        _logger.debug("Schema set with %d top-level entries", len(self._schema or {}))

    def _schema_node(self, cursor: values.Cursor) -> schema.SchemaNode | None:
        if not self._schema or not cursor:
            return None
        first, *rest = cursor
        node = self._schema.get(str(first))
        for step in rest:
            if node is None:
                return None
            node = node.child(str(step))
        return node

    def get_schema(self, path: str) -> schema.SchemaNode | None:
        """Return the schema node declared for a path, descending through properties."""
        return self._schema_node(values.parse_path(path))

    def has_schema(self, path: str) -> bool:
        """Check whether a path has a schema declaration."""
        return self.get_schema(path) is not None

    def _iter_schema_nodes(self) -> _typing.Iterator[tuple[values.Cursor, schema.SchemaNode]]:
        def walk(
            nodes: _abc.Mapping[str, schema.SchemaNode], prefix: values.Cursor
        ) -> _typing.Iterator[tuple[values.Cursor, schema.SchemaNode]]:
            for key, node in nodes.items():
                cursor = prefix + (values.Key(key),)
                yield cursor, node
                if node.properties:
                    yield from walk(node.properties, cursor)

        if self._schema:
            yield from walk(self._schema, ())

    def get_schema_paths(self) -> list[str]:
        """List every declared schema path in pre-order."""
        return [values.format_path(cursor) for cursor, _ in self._iter_schema_nodes()]

    def _is_declared(self, cursor: values.Cursor) -> bool:
        """Whether a value path falls under a schema declaration."""
        if not self._schema or not cursor:
            return False
        node = self._schema.get(str(cursor[0]))
        for step in cursor[1:]:
            if node is None:
                return False
            if not node.properties:
                # Declared without properties: any sub-path is accepted
                return True
            node = node.child(str(step))
        return node is not None

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> list[schema.ValidationError]:
        """Validate the merged values against the schema."""
        if not self._schema:
            return []
        return schema.validate(self.get_merged_values(), self._schema)

    def validate_value(self, path: str, value: _typing.Any) -> list[schema.ValidationError]:
        """Validate a candidate value for one path (e.g. on field blur)."""
        node = self.get_schema(path)
        if node is None:
            return []
        return schema.validate_path(value, node, path)

    def is_valid(self) -> bool:
        """Check whether the merged values pass validation."""
        return not self.validate()

    def get_validation_errors(
        self,
        paths: _typing.Iterable[str] | None = None,
    ) -> list[schema.ValidationError]:
        """
        Return validation errors, optionally limited to path prefixes.

        Args:
            paths: Only keep errors at or under any of these paths.
        """
        all_errors = self.validate()
        if paths is None:
            return all_errors
        prefixes = list(paths)
        return [error for error in all_errors if any(_is_under(error.path, p) for p in prefixes)]

    # =========================================================================
    # Processing
    # =========================================================================

    def process(self) -> ProcessedValues:
        """Merge, validate and collect warnings in one pass."""
        merged = self.get_merged_values()
        errors_found = schema.validate(merged, self._schema) if self._schema else []
        warnings: list[str] = []

        if self._schema and self._validation.warn_missing_required:
            missing = [
                values.format_path(cursor)
                for cursor, node in self._iter_schema_nodes()
                if node.required and values.resolve(merged, cursor) is None
            ]
            if missing:
                warnings.append(f"Missing required values: {', '.join(missing)}")

        if self._schema and self._validation.warn_unknown_paths:
            unknown = [
                values.format_path(cursor)
                for cursor, _ in values.iter_leaves(merged)
                if not self._is_declared(cursor)
            ]
            if unknown:
                warnings.append(f"Unknown properties: {', '.join(unknown)}")

        return ProcessedValues(
            values=merged,
            schema=self._schema,
            errors=errors_found,
            warnings=warnings,
        )

    # =========================================================================
    # Comparison
    # =========================================================================

    def compare(self, other: ValuesProcessor) -> list[diff.DiffEntry]:
        """Diff this processor's merged values (old) against another's (new)."""
        return self.generate_diff(self.get_merged_values(), other.get_merged_values())

    def generate_diff(
        self,
        old_values: _abc.Mapping[str, _typing.Any],
        new_values: _abc.Mapping[str, _typing.Any],
    ) -> list[diff.DiffEntry]:
        """Diff two arbitrary value trees."""
        return diff.diff(old_values, new_values)

    # =========================================================================
    # Export / import
    # =========================================================================

    def export_to_yaml(self) -> str:
        """Render the merged values as text."""
        return serialization.to_text(self.get_merged_values(), indent=self._serializer.indent)

    def export_user_values_to_yaml(self) -> str:
        """Render only the user overrides as text."""
        return serialization.to_text(self._user_values, indent=self._serializer.indent)

    def import_from_yaml(self, text: str) -> None:
        """
        Replace user values with a parsed values document.

        Raises:
            ParseError: If the text cannot be parsed or is not a mapping.
        """
        data = serialization.from_text(text, allow_fallback=self._serializer.allow_fallback)
        if not isinstance(data, dict):
            raise errors.ParseError(
                "yaml", f"values must be a mapping, got {values.kind_of(data).value}"
            )
        self._user_values = data
        _logger.debug("Imported %d user value paths from YAML", len(values.list_leaf_paths(data)))

    def export_to_json(self) -> str:
        """Render the merged values as indented JSON."""
        return _json.dumps(self.get_merged_values(), indent=2)

    def import_from_json(self, text: str) -> None:
        """
        Replace user values with a parsed JSON object.

        Raises:
            ParseError: If the text is not valid JSON or not an object.
        """
        try:
            data = _json.loads(text)
        except ValueError as e:
            raise errors.ParseError("json", str(e)) from e
        if not isinstance(data, dict):
            raise errors.ParseError(
                "json", f"values must be an object, got {values.kind_of(data).value}"
            )
        self._user_values = data
        _logger.debug("Imported %d user value paths from JSON", len(values.list_leaf_paths(data)))

    # =========================================================================
    # Session helpers
    # =========================================================================

    def clone(self) -> ValuesProcessor:
        """New processor sharing defaults and schema, with its own user values."""
        cloned = ValuesProcessor(self._default_values, settings=self._settings)
        cloned._schema = self._schema
        cloned.set_user_values(self._user_values)
        return cloned

    def get_summary(self) -> ValuesSummary:
        """Summarize value counts and validation state."""
        error_count = len(self.validate())
        return ValuesSummary(
            total_values=len(values.list_leaf_paths(self.get_merged_values())),
            user_modified_values=len(values.list_leaf_paths(self._user_values)),
            validation_errors=error_count,
            is_valid=error_count == 0,
            has_user_values=bool(self._user_values),
            has_schema=self._schema is not None,
        )
