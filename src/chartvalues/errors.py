"""
Exceptions raised by chartvalues.

Only structurally malformed input raises. Semantically invalid values are
reported as data (see chartvalues.schema.ValidationError).
"""

from __future__ import annotations


class ChartValuesError(Exception):
    """Base class for chartvalues errors."""

    pass


class ParseError(ChartValuesError):
    """Text or JSON input could not be read into a value tree."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        self.message = message
        super().__init__(f"Failed to parse {source.upper()}: {message}")


class SchemaError(ChartValuesError):
    """A schema document could not be read into schema nodes."""

    pass
