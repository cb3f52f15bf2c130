"""Configuration section types for chartvalues settings.

Each section is a Pydantic model nested within the main Settings class:
- SerializerConfig: indent, allow_fallback
- ValidationConfig: warn_missing_required, warn_unknown_paths
- LoggingConfig: level

All sections use `extra="allow"` so misspelled keys are kept rather than
dropped; `Settings.collect_all_extra_fields()` lists them for auditing.
"""

import typing as _typing

import pydantic as _pydantic

import chartvalues.values as values


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config sections.

    Unknown fields are preserved so a config audit can report them.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Return fields that were provided but are not part of the section."""
        return dict(self.model_extra) if self.model_extra else {}

    def collect_all_extra_fields(
        self,
        prefix: str = "",
    ) -> dict[str, _typing.Any]:
        """
        Recursively collect unknown fields with dotted paths.

        Example:
            {"serializer.indnet": 4}
        """
        result: dict[str, _typing.Any] = {}
        for key, value in self.get_extra_fields().items():
            result[values.join_path(prefix, key)] = value

        for field_name in self.__class__.model_fields:
            value = getattr(self, field_name, None)
            if isinstance(value, ConfigBase):
                child_prefix = values.join_path(prefix, field_name)
                result.update(value.collect_all_extra_fields(child_prefix))
        return result


# =============================================================================
# Serializer Settings
# =============================================================================


class SerializerConfig(ConfigBase):
    """
    Text encoding settings.

    YAML section: serializer.*
    """

    indent: int = _pydantic.Field(default=2, ge=1, le=8)
    """Spaces per nesting level when writing values text."""

    allow_fallback: bool = True
    """Read flat `key: value` lines when structured parsing fails."""


# =============================================================================
# Validation Settings
# =============================================================================


class ValidationConfig(ConfigBase):
    """
    Warnings reported by ValuesProcessor.process().

    YAML section: validation.*
    """

    warn_missing_required: bool = True
    """Warn about required schema paths absent from the merged values."""

    warn_unknown_paths: bool = True
    """Warn about value paths with no schema entry."""


# =============================================================================
# Logging Settings
# =============================================================================


class LoggingConfig(ConfigBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: _typing.Literal["debug", "info", "warning", "error"] = "warning"
    """Log level applied by the CLI."""
