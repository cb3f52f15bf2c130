"""
chartvalues - hierarchical configuration values for chart deployments.

Deep-merges chart defaults with user overrides, validates the result against
a per-path schema, diffs value trees and reads/writes them as text or JSON.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("chartvalues")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from chartvalues.errors import ChartValuesError, ParseError, SchemaError  # noqa: E402
from chartvalues.processor import ProcessedValues, ValuesProcessor, ValuesSummary  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "ChartValuesError",
    "ParseError",
    "ProcessedValues",
    "SchemaError",
    "ValuesProcessor",
    "ValuesSummary",
]
