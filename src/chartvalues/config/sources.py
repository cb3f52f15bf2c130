"""Layered YAML settings source for chartvalues configuration.

Configuration layers (in precedence order, highest first):
1. Environment variables (handled by pydantic-settings)
2. Project config: .chartvalues/config.yaml in the working directory
3. User config: ~/.config/chartvalues/config.yaml (or CHARTVALUES_CONFIG_DIR)
4. Built-in defaults: bundled defaults/config.yaml

Layers 2-4 are merged with the values merge engine, so nested sections
merge key by key while scalars and lists override.

Environment variables:
- CHARTVALUES_CONFIG_DIR: Override user config directory (default: ~/.config/chartvalues)
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import chartvalues.serialization as serialization
import chartvalues.values as values

_logger = _logging.getLogger(__name__)

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "CHARTVALUES_CONFIG_DIR"

CONFIG_FILE_NAME = "config.yaml"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def get_builtin_defaults_path() -> _pathlib.Path:
    """Path to the bundled defaults/config.yaml."""
    return _pathlib.Path(__file__).parent / "defaults" / CONFIG_FILE_NAME


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects CHARTVALUES_CONFIG_DIR if set, otherwise the XDG path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / "chartvalues"


def get_user_config_path() -> _pathlib.Path:
    """Path to config.yaml in the user config directory."""
    return get_user_config_dir() / CONFIG_FILE_NAME


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Path to the project config file under a project root."""
    return project_root / ".chartvalues" / CONFIG_FILE_NAME


def load_config_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Load one YAML config file.

    Returns:
        Parsed mapping, or None if the file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML, or
            does not contain a mapping at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError as e:
        raise ConfigFileError(path, f"permission denied: {e}") from e
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        parsed = _yaml.load(content, Loader=serialization.ValuesLoader)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if parsed is None:
        return None
    if not isinstance(parsed, dict):
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping, got {type(parsed).__name__}",
        )
    return parsed


class LayeredYamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that merges built-in, user and project YAML files.

    Flow:
    1. Load each YAML file into a dict
    2. Merge dicts in ascending precedence (builtin -> user -> project)
    3. Return the merged dict to pydantic-settings for validation
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
        builtin_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            project_root: Directory holding .chartvalues/config.yaml.
            user_config_path: Override path for the user config file (for testing).
            builtin_config_path: Override path for built-in defaults (for testing).
        """
        super().__init__(settings_cls)
        self._project_root = project_root
        self._user_config_path = user_config_path or get_user_config_path()
        self._builtin_config_path = builtin_config_path or get_builtin_defaults_path()
        # (layer name, path) in ascending precedence
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._merged = self._load_config_layers()

    def _load_config_layers(self) -> dict[str, _typing.Any]:
        # Built-in defaults are required: missing or empty means a broken install.
        if not self._builtin_config_path.exists():
            raise ConfigFileError(
                self._builtin_config_path,
                "built-in defaults not found (possible installation problem)",
            )
        builtin = load_config_file(self._builtin_config_path)
        if not builtin:
            raise ConfigFileError(
                self._builtin_config_path,
                "built-in defaults file is empty (possible installation problem)",
            )
        layers: list[dict[str, _typing.Any]] = [builtin]
        self._loaded_layers.append(("built-in", self._builtin_config_path))

        optional: list[tuple[str, _pathlib.Path]] = [("user", self._user_config_path)]
        if self._project_root is not None:
            optional.append(("project", get_project_config_path(self._project_root)))

        for name, path in optional:
            if not path.exists():
                continue
            content = load_config_file(path)
            if content:
                layers.append(content)
                self._loaded_layers.append((name, path))
                _logger.debug("Loaded %s config from %s", name, path)

        merged: dict[str, _typing.Any] = values.merge_all(*layers)
        return merged

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """Layers that were loaded, lowest precedence first."""
        return list(self._loaded_layers)

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """Get the merged value for one top-level field."""
        value = self._merged.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the merged config, unknown keys included."""
        return dict(self._merged)
