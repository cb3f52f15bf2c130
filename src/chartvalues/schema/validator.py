"""
Schema-driven validation of value trees.

Rules for one path, in order:
1. Required and absent/None -> "Required value is missing", stop
2. Absent/None and optional -> valid, stop
3. Kind mismatch -> one error, stop
4. enum membership
5. numeric minimum / maximum (each violated bound is its own error)
6. string pattern
7. array items, reported at "path[index]"
8. object properties, reported at "path.key" (absent properties included)

Validation never raises on a well-formed tree; every problem is returned as
a ValidationError so callers can validate a whole form or a single field
with the same code.
"""

from __future__ import annotations

import collections.abc as _abc
import re as _re
import typing as _typing

import chartvalues.schema.types as types
import chartvalues.values as values


def _describe(value: _typing.Any) -> str:
    """Kind name used in type mismatch messages."""
    if values.is_nan(value):
        return "NaN"
    try:
        return values.kind_of(value).value
    except TypeError:
        return type(value).__name__


def _format_option(option: _typing.Any) -> str:
    if option is None:
        return "null"
    if isinstance(option, bool):
        return "true" if option else "false"
    return str(option)


def is_kind_valid(value: _typing.Any, kind: types.SchemaKind) -> bool:
    """
    Check a present value against a declared kind.

    number additionally rejects NaN; object rejects sequences.
    """
    try:
        actual = values.kind_of(value)
    except TypeError:
        return False
    if kind == "number":
        return actual is values.Kind.NUMBER and not values.is_nan(value)
    return actual.value == kind


def _error(
    path: values.Cursor,
    message: str,
    value: _typing.Any,
    node: types.SchemaNode,
) -> types.ValidationError:
    return types.ValidationError(
        path=values.format_path(path),
        message=message,
        value=value,
        schema=node,
    )


def _validate_at(
    value: _typing.Any,
    node: types.SchemaNode,
    cursor: values.Cursor,
    errors: list[types.ValidationError],
) -> None:
    absent = value is None or values.is_missing(value)
    if absent:
        if node.required:
            errors.append(_error(cursor, "Required value is missing", None, node))
        return

    if node.kind is not None and not is_kind_valid(value, node.kind):
        errors.append(
            _error(
                cursor,
                f"Expected type '{node.kind}' but got '{_describe(value)}'",
                value,
                node,
            )
        )
        return

    if node.enum is not None and not any(values.equal(value, option) for option in node.enum):
        options = ", ".join(_format_option(option) for option in node.enum)
        errors.append(_error(cursor, f"Value must be one of: {options}", value, node))

    if node.kind == "number":
        if node.minimum is not None and value < node.minimum:
            errors.append(_error(cursor, f"Value must be at least {node.minimum}", value, node))
        if node.maximum is not None and value > node.maximum:
            errors.append(_error(cursor, f"Value must be at most {node.maximum}", value, node))

    if node.kind == "string" and node.pattern:
        try:
            matched = _re.search(node.pattern, value) is not None
        except _re.error:
            errors.append(_error(cursor, f"Invalid pattern: {node.pattern}", value, node))
        else:
            if not matched:
                errors.append(
                    _error(cursor, f"Value does not match pattern: {node.pattern}", value, node)
                )

    if node.kind == "array" and node.items is not None:
        for index, item in enumerate(value):
            _validate_at(item, node.items, cursor + (values.Index(index),), errors)

    if node.kind == "object" and node.properties:
        for key, child in node.properties.items():
            child_value = value.get(key, values.MISSING)
            _validate_at(child_value, child, cursor + (values.Key(key),), errors)


def validate_path(
    value: _typing.Any,
    node: types.SchemaNode,
    path: str,
) -> list[types.ValidationError]:
    """
    Validate a single value against the schema declared for its path.

    Args:
        value: The value to check (None for absent).
        node: Schema node for the path.
        path: Dotted path used in error reports.

    Returns:
        Errors for this path and any nested items/properties.
    """
    errors: list[types.ValidationError] = []
    _validate_at(value, node, values.parse_path(path, allow_index=True), errors)
    return errors


def validate(
    tree: _typing.Any,
    schema: _abc.Mapping[str, types.SchemaNode],
    errors: list[types.ValidationError] | None = None,
) -> list[types.ValidationError]:
    """
    Validate a value tree by walking the schema tree.

    Schema-declared paths are checked even when the tree does not supply
    them, so missing required values are reported.

    Args:
        tree: Value tree (usually the merged values).
        schema: Top-level schema mapping, key -> SchemaNode.
        errors: Optional list to accumulate into.

    Returns:
        The accumulated errors, in schema declaration order.
    """
    if errors is None:
        errors = []
    source = tree if isinstance(tree, _abc.Mapping) else {}
    for key, node in schema.items():
        _validate_at(source.get(key, values.MISSING), node, (values.Key(key),), errors)
    return errors
