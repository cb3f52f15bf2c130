"""
Value kinds and path cursor types.

This module provides the closed set of shapes a value tree can take and the
typed cursor that string paths are resolved to before any walk or mutation:
- Kind: tag for each value shape (null, boolean, number, string, sequence, mapping)
- kind_of(): classify a Python value into exactly one Kind
- Key / Index: cursor steps (mapping key, sequence position)
- Cursor: tuple of steps, e.g. (Key("image"), Key("tag"))
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import enum as _enum
import math as _math
import typing as _typing

# A value tree is built from plain Python containers and scalars.
# Example: {"replicas": 1, "image": {"tag": "latest"}, "ports": [80, 443]}
ValueTree: _typing.TypeAlias = _typing.Any

# Mapping-shaped tree (what processors own)
ValueMapping: _typing.TypeAlias = dict[str, _typing.Any]


class _MissingType:
    """Sentinel type marking an absent value (distinct from None)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False


MISSING: _typing.Final = _MissingType()


def is_missing(value: _typing.Any) -> bool:
    """Check if a value is the MISSING sentinel."""
    return value is MISSING


class Kind(_enum.Enum):
    """Shape of a value in a tree."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "array"
    MAPPING = "object"

    @property
    def is_container(self) -> bool:
        """Whether values of this kind hold nested values."""
        return self in {Kind.SEQUENCE, Kind.MAPPING}


def kind_of(value: _typing.Any) -> Kind:
    """
    Classify a value into its Kind.

    bool is checked before int (bool is an int subclass in Python).
    str/bytes are never sequences.

    Raises:
        TypeError: If the value is not part of a value tree.
    """
    if value is None:
        return Kind.NULL
    if isinstance(value, bool):
        return Kind.BOOLEAN
    if isinstance(value, (int, float)):
        return Kind.NUMBER
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, _abc.Mapping):
        return Kind.MAPPING
    if isinstance(value, _abc.Sequence) and not isinstance(value, (bytes, bytearray)):
        return Kind.SEQUENCE
    raise TypeError(f"Unsupported value type in tree: {type(value).__name__}")


def is_mapping(value: _typing.Any) -> bool:
    """Check if a value is a mapping node (never raises)."""
    return isinstance(value, _abc.Mapping)


def is_nan(value: _typing.Any) -> bool:
    """Check if a value is a float NaN."""
    return isinstance(value, float) and _math.isnan(value)


# =============================================================================
# Cursor steps
# =============================================================================


@_dataclasses.dataclass(frozen=True, slots=True)
class Key:
    """Step into a mapping by key."""

    name: str

    def __str__(self) -> str:
        return self.name


@_dataclasses.dataclass(frozen=True, slots=True)
class Index:
    """Step into a sequence by position (display and reads only)."""

    position: int

    def __str__(self) -> str:
        return f"[{self.position}]"


Step: _typing.TypeAlias = Key | Index
Cursor: _typing.TypeAlias = tuple[Step, ...]
