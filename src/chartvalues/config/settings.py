"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with CHARTVALUES_ prefix
3. .env file named by CHARTVALUES_ENV_FILE (if set and present)
4. Layered YAML config files:
   - Project config: .chartvalues/config.yaml (highest)
   - User config: ~/.config/chartvalues/config.yaml
   - Built-in defaults: bundled defaults/config.yaml (lowest)

Nested config uses double underscore delimiter:
  CHARTVALUES_SERIALIZER__INDENT=4
  CHARTVALUES_VALIDATION__WARN_UNKNOWN_PATHS=false

Settings are passed explicitly to the objects that need them; nothing in
chartvalues reads them from module-level state.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import chartvalues.config.sources as sources
import chartvalues.config.types as types


def _get_env_file() -> str | None:
    """Return CHARTVALUES_ENV_FILE if it names an existing file."""
    env_file = _os.environ.get("CHARTVALUES_ENV_FILE")
    if env_file and _pathlib.Path(env_file).exists():
        return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    chartvalues configuration settings.

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (CHARTVALUES_*)
    3. .env file
    4. Project config (.chartvalues/config.yaml)
    5. User config (~/.config/chartvalues/config.yaml)
    6. Built-in defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="CHARTVALUES_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args) (highest)
        2. env_settings (CHARTVALUES_* env vars)
        3. dotenv_settings (.env file)
        4. layered YAML config
        5. (defaults via Field definitions) (lowest)
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.LayeredYamlSettingsSource(settings_cls, _pathlib.Path.cwd()),
            file_secret_settings,
        )

    version: int = _pydantic.Field(default=1, description="Config schema version")

    serializer: types.SerializerConfig = _pydantic.Field(
        default_factory=types.SerializerConfig
    )
    """Text encoding settings."""

    validation: types.ValidationConfig = _pydantic.Field(
        default_factory=types.ValidationConfig
    )
    """Warning classes reported by process()."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Logging settings."""

    def collect_all_extra_fields(self) -> dict[str, _typing.Any]:
        """
        Collect unknown keys from the top level and every section.

        Returns:
            Flat dict of dotted path -> value, e.g. {"serializer.indnet": 4}.
        """
        result: dict[str, _typing.Any] = dict(self.model_extra or {})
        for name in ("serializer", "validation", "logging"):
            section: types.ConfigBase = getattr(self, name)
            result.update(section.collect_all_extra_fields(name))
        return result
