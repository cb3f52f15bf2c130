"""
Structural equality over value trees.

Equality is decided by Kind first: values of different kinds are never
equal, so True != 1 and "1" != 1, while 1 == 1.0 (both numbers).
"""

from __future__ import annotations

import typing as _typing

import chartvalues.values._types as _types


def equal(a: _typing.Any, b: _typing.Any) -> bool:
    """
    Check two values for deep structural equality.

    - Scalars: same kind and equal value (NaN never equals anything)
    - Sequences: same length, pairwise equal, order-sensitive
    - Mappings: same key set, pairwise equal values, order-insensitive
    - None / MISSING: equal only to themselves
    """
    if a is b and not _types.is_nan(a):
        return True
    if _types.is_missing(a) or _types.is_missing(b):
        return False

    kind = _types.kind_of(a)
    if kind is not _types.kind_of(b):
        return False

    if not kind.is_container:
        return bool(a == b)
    if kind is _types.Kind.SEQUENCE:
        if len(a) != len(b):
            return False
        return all(equal(left, right) for left, right in zip(a, b))
    # MAPPING
    if len(a) != len(b):
        return False
    for key, value in a.items():
        if key not in b:
            return False
        if not equal(value, b[key]):
            return False
    return True
