"""
Structural diff between two value trees.

Every leaf path reachable from either tree is compared; mappings are walked,
sequences and scalars are compared as whole leaves. Output is sorted by
path so identical inputs always give identical diffs.

Example:
    >>> [(e.path, e.kind.value) for e in diff({"a": 1, "b": 2}, {"a": 1, "c": 3})]
    [('b', 'removed'), ('c', 'added')]
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import typing as _typing

import chartvalues.values as values


class DiffKind(_enum.Enum):
    """How a path differs between the old and new tree."""

    ADDED = "added"
    """Absent in old, present in new."""

    REMOVED = "removed"
    """Present in old, absent in new."""

    MODIFIED = "modified"
    """Present in both with structurally different values."""

    @property
    def inverse(self) -> DiffKind:
        """The kind this entry has when old and new are swapped."""
        if self is DiffKind.ADDED:
            return DiffKind.REMOVED
        if self is DiffKind.REMOVED:
            return DiffKind.ADDED
        return DiffKind.MODIFIED


@_dataclasses.dataclass(frozen=True, slots=True)
class DiffEntry:
    """One path where the trees disagree. Absent sides are None."""

    path: str
    old_value: _typing.Any
    new_value: _typing.Any
    kind: DiffKind

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "path": self.path,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "type": self.kind.value,
        }


def diff(old: _typing.Any, new: _typing.Any) -> list[DiffEntry]:
    """
    Compare two value trees leaf by leaf.

    A present None counts as present, so {"a": None} -> {} is a removal.

    Args:
        old: The baseline tree.
        new: The tree compared against the baseline.

    Returns:
        One DiffEntry per differing leaf path, sorted by path.
    """
    old_leaves = dict(values.iter_leaves(old))
    new_leaves = dict(values.iter_leaves(new))

    cursors = {**dict.fromkeys(old_leaves), **dict.fromkeys(new_leaves)}
    ordered = sorted(cursors, key=values.format_path)

    entries: list[DiffEntry] = []
    for cursor in ordered:
        path = values.format_path(cursor)
        # Leaves of one tree can sit under a non-mapping leaf of the other.
        old_value = old_leaves.get(cursor, values.resolve(old, cursor, values.MISSING))
        new_value = new_leaves.get(cursor, values.resolve(new, cursor, values.MISSING))
        old_absent = values.is_missing(old_value)
        new_absent = values.is_missing(new_value)

        if old_absent and not new_absent:
            entries.append(DiffEntry(path, None, new_value, DiffKind.ADDED))
        elif not old_absent and new_absent:
            entries.append(DiffEntry(path, old_value, None, DiffKind.REMOVED))
        elif not old_absent and not values.equal(old_value, new_value):
            entries.append(DiffEntry(path, old_value, new_value, DiffKind.MODIFIED))
    return entries
