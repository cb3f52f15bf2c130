"""
Text encoding of value trees.

Writing produces a YAML-compatible block layout:

    replicas: 1
    image:
      tag: "1.2.3"
    ports:
      - 80
      - 443

Reading is two-tiered:
1. Strict: the whole text is parsed as one YAML document (JSON is accepted
   too, being valid YAML).
2. Fallback: when the strict tier fails, each line is read as a flat
   `key: value` pair with textual scalar coercion. Nested blocks, sequence
   items and unrecognized lines raise ParseError instead of being dropped.
"""

from __future__ import annotations

import logging as _logging
import math as _math
import pathlib as _pathlib
import re as _re
import typing as _typing

import yaml as _yaml

import chartvalues.errors as errors
import chartvalues.serialization._loader as _loader
import chartvalues.values as values

_logger = _logging.getLogger(__name__)

_LINE = _re.compile(r"^([^:]+):\s*(.*)$")
_NUMBER = _re.compile(r"^-?\d+(\.\d+)?$")

DEFAULT_INDENT = 2


# =============================================================================
# Writing
# =============================================================================


def _render_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if _math.isnan(value):
        return ".nan"
    if _math.isinf(value):
        return ".inf" if value > 0 else "-.inf"
    text = repr(value)
    # YAML floats need a dot before the exponent
    if "." not in text and "e" in text:
        text = text.replace("e", ".0e", 1)
    return text


def _quote(text: str) -> str:
    # double-quoted style escapes every non-printable character
    dumped = _yaml.safe_dump(
        text, default_style='"', allow_unicode=True, width=float("inf")
    ).rstrip("\n")
    return dumped.removesuffix("\n...")


def _render_key(key: str) -> str:
    return key if _loader.is_plain_key(key) else _quote(key)


def _render(value: _typing.Any, level: int, indent: int) -> str:
    pad = " " * (indent * level)
    kind = values.kind_of(value)

    if kind is values.Kind.NULL:
        return "null"
    if kind is values.Kind.BOOLEAN:
        return "true" if value else "false"
    if kind is values.Kind.NUMBER:
        return _render_number(value)
    if kind is values.Kind.STRING:
        return _quote(value)

    if kind is values.Kind.SEQUENCE:
        if not value:
            return "[]"
        bullet = "-" + " " * (indent - 1)
        lines = [
            f"{pad}{bullet}{_render(item, level + 1, indent).lstrip()}" for item in value
        ]
        return "\n" + "\n".join(lines)

    # MAPPING
    if not value:
        return "{}"
    lines = []
    for key, item in value.items():
        rendered = _render(item, level + 1, indent)
        separator = "" if rendered.startswith("\n") else " "
        lines.append(f"{pad}{_render_key(str(key))}:{separator}{rendered}")
    return "\n" + "\n".join(lines)


def to_text(tree: _typing.Any, *, indent: int = DEFAULT_INDENT) -> str:
    """
    Render a value tree as text.

    Args:
        tree: The tree to render.
        indent: Spaces per nesting level.

    Returns:
        Text with no leading newline. Empty containers render as [] / {}.

    Raises:
        ValueError: If indent is less than 1.
    """
    if indent < 1:
        raise ValueError(f"indent must be at least 1, got {indent}")
    text = _render(tree, 0, indent)
    return text[1:] if text.startswith("\n") else text


# =============================================================================
# Reading
# =============================================================================


def coerce_scalar(text: str) -> _typing.Any:
    """
    Interpret a scalar written as text.

    - "null", "~" or empty -> None
    - "true" / "false" -> bool
    - -?digits(.digits)? -> int or float
    - "double" or 'single' quoted -> unescaped string
    - anything else -> the text itself

    Example:
        >>> coerce_scalar("3"), coerce_scalar("0.5"), coerce_scalar("'it''s'")
        (3, 0.5, "it's")
    """
    if text in ("null", "~", ""):
        return None
    if text == "true":
        return True
    if text == "false":
        return False
    match = _NUMBER.match(text)
    if match:
        return float(text) if match.group(1) else int(text)
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1].replace('\\"', '"')
    if len(text) >= 2 and text[0] == text[-1] == "'":
        return text[1:-1].replace("''", "'")
    return text


def parse_lines(text: str) -> dict[str, _typing.Any]:
    """
    Read text as flat `key: value` lines.

    Blank lines and lines starting with # are skipped.

    Raises:
        ParseError: On an indented line, a sequence item, or any line that
            is not a key/value pair. Nested structure is never dropped
            silently.
    """
    result: dict[str, _typing.Any] = {}
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if line[0] in " \t":
            raise errors.ParseError(
                "yaml",
                f"line {number}: nested structure cannot be read as flat key/value pairs",
            )
        if stripped == "-" or stripped.startswith("- "):
            raise errors.ParseError(
                "yaml",
                f"line {number}: sequence items cannot be read as flat key/value pairs",
            )
        match = _LINE.match(line)
        if match is None:
            raise errors.ParseError("yaml", f"line {number}: expected 'key: value', got {stripped!r}")
        key = coerce_scalar(match.group(1).strip())
        result[key if isinstance(key, str) else match.group(1).strip()] = coerce_scalar(
            match.group(2).strip()
        )
    return result


def from_text(text: str, *, allow_fallback: bool = True) -> _typing.Any:
    """
    Parse text into a value tree.

    Args:
        text: YAML (or JSON) text, or flat `key: value` lines.
        allow_fallback: Try the flat line reader when structured parsing
            fails. When False, structured parse failures raise directly.

    Returns:
        The parsed tree. An empty document gives {}.

    Raises:
        ParseError: If neither tier can read the text.
    """
    try:
        data = _loader.load(text)
    except _yaml.YAMLError as e:
        if not allow_fallback:
            raise errors.ParseError("yaml", str(e)) from e
        _logger.warning("Structured parse failed, reading input as flat key/value lines: %s", e)
        try:
            return parse_lines(text)
        except errors.ParseError as fallback_error:
            raise errors.ParseError(
                "yaml",
                f"{fallback_error.message} (structured parse: {getattr(e, 'problem', None) or e})",
            ) from e
    return {} if data is None else data


def load_values_file(path: _pathlib.Path | str, *, allow_fallback: bool = True) -> dict[str, _typing.Any]:
    """
    Read a values file into a mapping.

    Raises:
        ParseError: If the file content is unreadable or not a mapping.
        OSError: If the file cannot be read.
    """
    file_path = _pathlib.Path(path)
    data = from_text(file_path.read_text(encoding="utf-8"), allow_fallback=allow_fallback)
    if not isinstance(data, dict):
        raise errors.ParseError(
            "yaml",
            f"{file_path}: values must be a mapping, got {values.kind_of(data).value}",
        )
    return data


def parse_set_values(assignments: _typing.Iterable[str]) -> dict[str, _typing.Any]:
    """
    Build a tree from `path=value` assignments.

    Example:
        >>> parse_set_values(["replicas=3", "image.tag=1.2.3"])
        {'replicas': 3, 'image': {'tag': '1.2.3'}}

    Raises:
        ValueError: If an assignment has no '='.
    """
    result: dict[str, _typing.Any] = {}
    for assignment in assignments:
        if "=" not in assignment:
            raise ValueError(f"Invalid assignment '{assignment}' (expected path=value)")
        path, raw = assignment.split("=", 1)
        values.set(result, path.strip(), coerce_scalar(raw.strip()))
    return result


def minimal_values_template(chart_name: str) -> str:
    """Starter values text for a chart that publishes no defaults."""
    return f"""# Values for {chart_name}
# Unable to fetch default values - please configure as needed

# Common configuration options:
# image:
#   repository: ""
#   tag: ""
#   pullPolicy: IfNotPresent

# resources:
#   limits:
#     cpu: 1000m
#     memory: 1Gi
#   requests:
#     cpu: 100m
#     memory: 128Mi

# service:
#   type: ClusterIP
#   port: 80
"""
