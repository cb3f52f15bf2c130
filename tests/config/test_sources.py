"""Tests for the layered YAML settings source.

Covers:
- Path helpers and CHARTVALUES_CONFIG_DIR
- Merge order across built-in, user and project layers
- Missing, empty and malformed files
- Unknown keys preserved for auditing
"""

import pathlib as _pathlib
import typing as _typing

import pydantic_settings as _pydantic_settings
import pytest as _pytest
import yaml as _yaml

import chartvalues.config as config
import chartvalues.config.sources as sources


class MinimalSettings(_pydantic_settings.BaseSettings):
    """Settings class the source is attached to in these tests."""

    model_config = _pydantic_settings.SettingsConfigDict(extra="allow")


def _write_yaml(path: _pathlib.Path, data: dict[str, _typing.Any]) -> _pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_yaml.safe_dump(data), encoding="utf-8")
    return path


def _source(
    tmp_path: _pathlib.Path,
    *,
    builtin: dict[str, _typing.Any] | None = None,
    user: dict[str, _typing.Any] | None = None,
    project: dict[str, _typing.Any] | None = None,
) -> sources.LayeredYamlSettingsSource:
    builtin_path = _write_yaml(tmp_path / "builtin.yaml", builtin or {"version": 1})
    user_path = tmp_path / "user" / "config.yaml"
    if user is not None:
        _write_yaml(user_path, user)
    project_root = tmp_path / "project"
    if project is not None:
        _write_yaml(sources.get_project_config_path(project_root), project)
    return sources.LayeredYamlSettingsSource(
        MinimalSettings,
        project_root,
        user_config_path=user_path,
        builtin_config_path=builtin_path,
    )


class TestLayeredYamlSettingsSourceClass:
    """Verify the LayeredYamlSettingsSource class API."""

    def test_is_pydantic_settings_source(self) -> None:
        """LayeredYamlSettingsSource should be a pydantic-settings source."""
        assert issubclass(
            sources.LayeredYamlSettingsSource,
            _pydantic_settings.PydanticBaseSettingsSource,
        )


class TestHelperFunctions:
    """Tests for path helper functions."""

    def test_get_builtin_defaults_path(self) -> None:
        """Should return path to defaults/config.yaml, which ships with the package."""
        path = sources.get_builtin_defaults_path()
        assert path.name == "config.yaml"
        assert path.parent.name == "defaults"
        assert path.exists()

    def test_get_user_config_path_default(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """Without env var, should return XDG-style user config path."""
        monkeypatch.delenv("CHARTVALUES_CONFIG_DIR", raising=False)
        path = sources.get_user_config_path()
        assert path == _pathlib.Path.home() / ".config" / "chartvalues" / "config.yaml"

    def test_get_user_config_path_with_env_var(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """With env var set, should use that directory."""
        monkeypatch.setenv("CHARTVALUES_CONFIG_DIR", "/custom/config/dir")
        assert sources.get_user_config_path() == _pathlib.Path("/custom/config/dir/config.yaml")

    def test_get_project_config_path(self) -> None:
        """Project config lives under .chartvalues/."""
        path = sources.get_project_config_path(_pathlib.Path("/repo"))
        assert path == _pathlib.Path("/repo/.chartvalues/config.yaml")


class TestMergeOrder:
    """Layer precedence: project > user > built-in."""

    def test_builtin_only(self, tmp_path: _pathlib.Path) -> None:
        """Built-in values come through unchanged."""
        source = _source(tmp_path, builtin={"serializer": {"indent": 2}})
        assert source() == {"serializer": {"indent": 2}}
        assert [name for name, _ in source.get_loaded_layers()] == ["built-in"]

    def test_project_overrides_user_overrides_builtin(self, tmp_path: _pathlib.Path) -> None:
        """Each layer contributes; higher layers win per key."""
        source = _source(
            tmp_path,
            builtin={"serializer": {"indent": 2, "allow_fallback": True}, "logging": {"level": "warning"}},
            user={"serializer": {"indent": 4}, "logging": {"level": "info"}},
            project={"logging": {"level": "debug"}},
        )
        assert source() == {
            "serializer": {"indent": 4, "allow_fallback": True},
            "logging": {"level": "debug"},
        }
        assert [name for name, _ in source.get_loaded_layers()] == ["built-in", "user", "project"]

    def test_lists_replace(self, tmp_path: _pathlib.Path) -> None:
        """Lists in a higher layer replace lower ones."""
        source = _source(tmp_path, builtin={"tags": ["a", "b"]}, user={"tags": ["c"]})
        assert source()["tags"] == ["c"]

    def test_get_field_value(self, tmp_path: _pathlib.Path) -> None:
        """Top-level fields are looked up in the merged dict."""
        source = _source(tmp_path, builtin={"version": 1, "serializer": {"indent": 2}})
        assert source.get_field_value(None, "version") == (1, "version", False)  # type: ignore[arg-type]
        assert source.get_field_value(None, "serializer") == (  # type: ignore[arg-type]
            {"indent": 2},
            "serializer",
            True,
        )
        assert source.get_field_value(None, "nope") == (None, "nope", False)  # type: ignore[arg-type]


class TestMissingAndMalformedFiles:
    """File problems."""

    def test_missing_optional_layers_ok(self, tmp_path: _pathlib.Path) -> None:
        """Absent user and project files are skipped."""
        source = _source(tmp_path, builtin={"version": 1})
        assert source() == {"version": 1}

    def test_empty_user_config_ok(self, tmp_path: _pathlib.Path) -> None:
        """An empty file contributes nothing."""
        user_path = tmp_path / "user.yaml"
        user_path.write_text("", encoding="utf-8")
        source = sources.LayeredYamlSettingsSource(
            MinimalSettings,
            user_config_path=user_path,
            builtin_config_path=_write_yaml(tmp_path / "builtin.yaml", {"version": 1}),
        )
        assert source() == {"version": 1}

    def test_malformed_yaml_raises(self, tmp_path: _pathlib.Path) -> None:
        """Broken YAML is a ConfigFileError naming the file."""
        user_path = tmp_path / "user.yaml"
        user_path.write_text("serializer: [unclosed\n", encoding="utf-8")
        with _pytest.raises(config.ConfigFileError, match="user.yaml"):
            sources.LayeredYamlSettingsSource(
                MinimalSettings,
                user_config_path=user_path,
                builtin_config_path=_write_yaml(tmp_path / "builtin.yaml", {"version": 1}),
            )

    def test_list_at_top_level_raises(self, tmp_path: _pathlib.Path) -> None:
        """Config must be a mapping."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with _pytest.raises(config.ConfigFileError, match="mapping"):
            sources.load_config_file(path)

    def test_missing_builtin_defaults_raises(self, tmp_path: _pathlib.Path) -> None:
        """A missing built-in file signals a broken install."""
        with _pytest.raises(config.ConfigFileError, match="built-in defaults not found"):
            sources.LayeredYamlSettingsSource(
                MinimalSettings,
                user_config_path=tmp_path / "user.yaml",
                builtin_config_path=tmp_path / "missing.yaml",
            )

    def test_empty_builtin_defaults_raises(self, tmp_path: _pathlib.Path) -> None:
        """An empty built-in file signals a broken install."""
        builtin = tmp_path / "builtin.yaml"
        builtin.write_text("", encoding="utf-8")
        with _pytest.raises(config.ConfigFileError, match="empty"):
            sources.LayeredYamlSettingsSource(
                MinimalSettings,
                user_config_path=tmp_path / "user.yaml",
                builtin_config_path=builtin,
            )

    def test_timestamps_stay_text(self, tmp_path: _pathlib.Path) -> None:
        """Config files are read with the values loader."""
        path = tmp_path / "c.yaml"
        path.write_text("released: 2024-01-01\n", encoding="utf-8")
        assert sources.load_config_file(path) == {"released": "2024-01-01"}


class TestUnknownKeys:
    """Unknown keys are preserved so they can be reported."""

    def test_unknown_keys_from_all_layers(self, tmp_path: _pathlib.Path) -> None:
        """Keys from every layer survive the merge."""
        source = _source(
            tmp_path,
            builtin={"version": 1},
            user={"serializer": {"indnet": 4}},
            project={"custom": True},
        )
        assert source() == {"version": 1, "serializer": {"indnet": 4}, "custom": True}
