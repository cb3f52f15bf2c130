"""
Shared pytest fixtures for chartvalues tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import click.testing as _click_testing
import pytest as _pytest

# Environment keys that should be cleared for isolated tests
ENV_PREFIX_TO_CLEAR = "CHARTVALUES_"


@_pytest.fixture
def isolated_config(
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _pathlib.Path:
    """
    Isolate tests from the user's config files and CHARTVALUES_* variables.

    Points CHARTVALUES_CONFIG_DIR at an empty directory and changes into an
    empty workspace, so only the built-in defaults apply.

    Returns:
        The workspace directory (current working directory for the test).
    """
    for key in list(_os.environ):
        if key.startswith(ENV_PREFIX_TO_CLEAR):
            monkeypatch.delenv(key)
    user_dir = tmp_path / "user-config"
    user_dir.mkdir()
    monkeypatch.setenv("CHARTVALUES_CONFIG_DIR", str(user_dir))
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    monkeypatch.chdir(workspace)
    return workspace


@_pytest.fixture
def cli_runner() -> _click_testing.CliRunner:
    """Click test runner."""
    return _click_testing.CliRunner()


@_pytest.fixture
def install_defaults() -> dict[str, _typing.Any]:
    """Chart defaults used by the install-form scenarios."""
    return {
        "replicas": 1,
        "image": {"repository": "nginx", "tag": "latest", "pullPolicy": "IfNotPresent"},
        "service": {"type": "ClusterIP", "port": 80},
        "ports": [80],
    }


@_pytest.fixture
def install_schema() -> dict[str, _typing.Any]:
    """Schema matching install_defaults."""
    return {
        "replicas": {"type": "number", "minimum": 1, "maximum": 10, "required": True},
        "image": {
            "type": "object",
            "properties": {
                "repository": {"type": "string", "required": True},
                "tag": {"type": "string", "pattern": r"^[\w.\-]+$"},
                "pullPolicy": {"type": "string", "enum": ["Always", "IfNotPresent", "Never"]},
            },
        },
        "service": {
            "type": "object",
            "properties": {
                "type": {"type": "string", "enum": ["ClusterIP", "NodePort", "LoadBalancer"]},
                "port": {"type": "number", "minimum": 1, "maximum": 65535},
            },
        },
        "ports": {"type": "array", "items": {"type": "number"}},
    }


@_pytest.fixture
def write_file(tmp_path: _pathlib.Path) -> _typing.Callable[[str, str], _pathlib.Path]:
    """
    Write a text file under tmp_path/files and return its path.

    Usage:
        def test_x(write_file):
            path = write_file("values.yaml", "replicas: 2\\n")
    """
    files_dir = tmp_path / "files"
    files_dir.mkdir(exist_ok=True)

    def _write(name: str, content: str) -> _pathlib.Path:
        path = files_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
