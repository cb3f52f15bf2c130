"""
Text serialization of value trees.
"""

from chartvalues.serialization._loader import ValuesLoader
from chartvalues.serialization.text import (
    DEFAULT_INDENT,
    coerce_scalar,
    from_text,
    load_values_file,
    minimal_values_template,
    parse_lines,
    parse_set_values,
    to_text,
)

__all__ = [
    "DEFAULT_INDENT",
    "ValuesLoader",
    "coerce_scalar",
    "from_text",
    "load_values_file",
    "minimal_values_template",
    "parse_lines",
    "parse_set_values",
    "to_text",
]
