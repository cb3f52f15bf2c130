"""
Path-addressed access to value trees.

Dot-delimited string paths ("image.tag") are accepted at the boundary and
resolved to a typed cursor before walking. Mutation only ever follows Key
steps; Index steps exist for display paths such as "ports[1]" and for reads.

Example:
    >>> tree = {"image": {"tag": "latest"}}
    >>> get(tree, "image.tag")
    'latest'
    >>> set(tree, "resources.limits.cpu", "500m")
    >>> tree["resources"]
    {'limits': {'cpu': '500m'}}
"""

from __future__ import annotations

import collections.abc as _abc
import re as _re
import typing as _typing

import chartvalues.values._types as _types

_INDEXED_SEGMENT = _re.compile(r"^(?P<name>[^\[\]]*)(?P<indexes>(?:\[\d+\])+)$")
_INDEX = _re.compile(r"\[(\d+)\]")

PathLike: _typing.TypeAlias = str | _types.Cursor


def parse_path(path: str, *, allow_index: bool = False) -> _types.Cursor:
    """
    Resolve a dot-delimited path into a cursor.

    Args:
        path: Path such as "image.tag" or, with allow_index, "ports[1]".
        allow_index: Interpret trailing "[n]" groups as Index steps.
            When False, brackets are ordinary key characters.

    Returns:
        Tuple of Key/Index steps.
    """
    steps: list[_types.Step] = []
    for segment in path.split("."):
        match = _INDEXED_SEGMENT.match(segment) if allow_index else None
        if match is None:
            steps.append(_types.Key(segment))
            continue
        if match.group("name"):
            steps.append(_types.Key(match.group("name")))
        for position in _INDEX.findall(match.group("indexes")):
            steps.append(_types.Index(int(position)))
    return tuple(steps)


def format_path(cursor: _types.Cursor) -> str:
    """
    Render a cursor as a display path.

    Example:
        >>> format_path((Key("ports"), Index(1), Key("name")))
        'ports[1].name'
    """
    parts: list[str] = []
    for step in cursor:
        if isinstance(step, _types.Index):
            parts.append(str(step))
        else:
            if parts:
                parts.append(".")
            parts.append(step.name)
    return "".join(parts)


def join_path(prefix: str, key: str) -> str:
    """Join a parent path and a child key."""
    return f"{prefix}.{key}" if prefix else key


def _to_cursor(path: PathLike, *, allow_index: bool = False) -> _types.Cursor:
    if isinstance(path, str):
        return parse_path(path, allow_index=allow_index)
    return tuple(path)


def resolve(
    tree: _typing.Any,
    cursor: _types.Cursor,
    default: _typing.Any = None,
) -> _typing.Any:
    """Walk a cursor through a tree, returning default when unreachable."""
    current = tree
    for step in cursor:
        if isinstance(step, _types.Index):
            if not isinstance(current, _abc.Sequence) or isinstance(current, str):
                return default
            if step.position >= len(current):
                return default
            current = current[step.position]
        else:
            if not isinstance(current, _abc.Mapping) or step.name not in current:
                return default
            current = current[step.name]
    return current


def get(tree: _typing.Any, path: PathLike, default: _typing.Any = None) -> _typing.Any:
    """
    Get the value at a path.

    Never raises: returns default as soon as an intermediate node is None,
    absent, or not a mapping where a further descent is required.

    Args:
        tree: The value tree to read.
        path: Dot-delimited path or cursor.
        default: Returned when the path is unreachable.
    """
    return resolve(tree, _to_cursor(path), default)


def contains(tree: _typing.Any, path: PathLike) -> bool:
    """Check if a path resolves to a present value (None counts as present)."""
    return not _types.is_missing(resolve(tree, _to_cursor(path), _types.MISSING))


def set(tree: _abc.MutableMapping[str, _typing.Any], path: PathLike, value: _typing.Any) -> None:  # noqa: A001 - path accessor verb
    """
    Assign a value at a path, creating intermediate mappings.

    Any intermediate segment that is missing or not a mapping is replaced
    with an empty dict. Mutates the tree in place.

    Raises:
        TypeError: If the cursor contains an Index step.
    """
    cursor = _to_cursor(path)
    keys = _mutation_keys(cursor)
    current = tree
    for name in keys[:-1]:
        child = current.get(name)
        if not isinstance(child, _abc.MutableMapping):
            child = {}
            current[name] = child
        current = child
    current[keys[-1]] = value


def delete(tree: _abc.MutableMapping[str, _typing.Any], path: PathLike) -> None:
    """
    Remove the value at a path.

    No-op when the parent mapping cannot be reached or the key is absent.
    """
    keys = _mutation_keys(_to_cursor(path))
    current: _typing.Any = tree
    for name in keys[:-1]:
        if not isinstance(current, _abc.MutableMapping):
            return
        current = current.get(name)
    if isinstance(current, _abc.MutableMapping):
        current.pop(keys[-1], None)


def _mutation_keys(cursor: _types.Cursor) -> list[str]:
    if not cursor:
        raise ValueError("Cannot mutate at an empty path")
    keys: list[str] = []
    for step in cursor:
        if isinstance(step, _types.Index):
            raise TypeError(f"Index steps are read-only: {format_path(cursor)}")
        keys.append(step.name)
    return keys


def iter_leaves(
    tree: _typing.Any,
    prefix: _types.Cursor = (),
) -> _typing.Iterator[tuple[_types.Cursor, _typing.Any]]:
    """
    Yield (cursor, value) for every leaf in pre-order.

    A leaf is any value that is not a mapping: sequences, scalars and None.
    Empty mappings yield nothing. A non-mapping root is yielded only when a
    prefix is given.
    """
    if not isinstance(tree, _abc.Mapping):
        if prefix:
            yield prefix, tree
        return
    for key, value in tree.items():
        cursor = prefix + (_types.Key(str(key)),)
        if isinstance(value, _abc.Mapping):
            yield from iter_leaves(value, cursor)
        else:
            yield cursor, value


def list_leaf_paths(tree: _typing.Any) -> list[str]:
    """
    List every leaf path of a tree in pre-order.

    Example:
        >>> list_leaf_paths({"a": 1, "b": {"c": [1, 2], "d": None}})
        ['a', 'b.c', 'b.d']
    """
    return [format_path(cursor) for cursor, _ in iter_leaves(tree)]
