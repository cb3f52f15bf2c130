"""
Value tree primitives: path access, deep merge, structural equality.

Example:
    >>> import chartvalues.values as values
    >>> merged = values.merge({"replicas": 1}, {"image": {"tag": "1.2.3"}})
    >>> values.get(merged, "image.tag")
    '1.2.3'
"""

from chartvalues.values._equality import equal
from chartvalues.values._merge import merge, merge_all
from chartvalues.values._paths import (
    PathLike,
    contains,
    delete,
    format_path,
    get,
    iter_leaves,
    join_path,
    list_leaf_paths,
    parse_path,
    resolve,
    set,
)
from chartvalues.values._types import (
    MISSING,
    Cursor,
    Index,
    Key,
    Kind,
    Step,
    ValueMapping,
    ValueTree,
    is_mapping,
    is_missing,
    is_nan,
    kind_of,
)

__all__ = [
    "MISSING",
    "Cursor",
    "Index",
    "Key",
    "Kind",
    "PathLike",
    "Step",
    "ValueMapping",
    "ValueTree",
    "contains",
    "delete",
    "equal",
    "format_path",
    "get",
    "is_mapping",
    "is_missing",
    "is_nan",
    "iter_leaves",
    "join_path",
    "kind_of",
    "list_leaf_paths",
    "merge",
    "merge_all",
    "parse_path",
    "resolve",
    "set",
]
