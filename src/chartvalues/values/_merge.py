"""
Deep merge of a base tree and an override tree.

Merge semantics (override wins):
- Mappings merge key by key, recursively
- Sequences from the override replace the base sequence wholesale
- Scalars and mismatched kinds: the override replaces the base
- None/absent override keeps the base

Example:
    >>> merge({"image": {"repo": "nginx", "tag": "latest"}}, {"image": {"tag": "1.2.3"}})
    {'image': {'repo': 'nginx', 'tag': '1.2.3'}}
    >>> merge({"tags": ["x", "y"]}, {"tags": ["z"]})
    {'tags': ['z']}
"""

from __future__ import annotations

import typing as _typing

import chartvalues.values._types as _types


def merge(base: _typing.Any, override: _typing.Any) -> _typing.Any:
    """
    Deep-merge override into base, returning a new tree.

    Neither input is mutated. Mappings along every merged path are fresh
    dicts; subtrees that only one side provides are returned by reference.

    Args:
        base: Lower-precedence tree (defaults).
        override: Higher-precedence tree (user values).

    Returns:
        The effective tree.
    """
    if override is None or _types.is_missing(override):
        return base
    if base is None or _types.is_missing(base):
        return override

    override_kind = _types.kind_of(override)
    if override_kind is _types.Kind.SEQUENCE:
        return list(override)
    if override_kind is _types.Kind.MAPPING and _types.kind_of(base) is _types.Kind.MAPPING:
        result = dict(base)
        for key, value in override.items():
            result[key] = merge(result.get(key), value)
        return result
    return override


def merge_all(*layers: _typing.Any) -> _typing.Any:
    """
    Merge layers in ascending precedence order (last layer wins).

    Example:
        >>> merge_all({"a": 1, "b": 1}, {"b": 2}, {"c": 3})
        {'a': 1, 'b': 2, 'c': 3}
    """
    result: _typing.Any = None
    for layer in layers:
        result = merge(result, layer)
    return result
