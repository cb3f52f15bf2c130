"""Tests for CLI main module."""

import json as _json
import pathlib as _pathlib
import typing as _typing

import click.testing as _click_testing
import pytest as _pytest
import yaml as _yaml

import chartvalues
import chartvalues.cli as cli

WriteFile = _typing.Callable[[str, str], _pathlib.Path]

DEFAULTS = """\
replicas: 1
image:
  repository: nginx
  tag: latest
ports:
  - 80
"""

SCHEMA = """\
replicas:
  type: number
  minimum: 1
  maximum: 10
  required: true
image:
  type: object
  properties:
    repository:
      type: string
      required: true
    tag:
      type: string
ports:
  type: array
  items:
    type: number
"""


@_pytest.fixture
def runner(isolated_config: _pathlib.Path) -> _click_testing.CliRunner:
    """CliRunner inside an isolated config workspace."""
    return _click_testing.CliRunner()


class TestCLIBasics:
    """Group options and help."""

    def test_help_lists_commands(self, runner: _click_testing.CliRunner) -> None:
        """Help output should list all commands."""
        result = runner.invoke(cli.cli, ["--help"])
        assert result.exit_code == 0
        for cmd in ["merge", "validate", "diff", "summary", "template", "config"]:
            assert cmd in result.output, f"Command '{cmd}' missing from help"

    def test_version(self, runner: _click_testing.CliRunner) -> None:
        """Version flag shows the package version."""
        result = runner.invoke(cli.cli, ["--version"])
        assert result.exit_code == 0
        assert chartvalues.__version__ in result.output

    def test_broken_config_is_clean_error(
        self,
        runner: _click_testing.CliRunner,
        isolated_config: _pathlib.Path,
    ) -> None:
        """Config file errors are reported without a traceback."""
        project_file = isolated_config / ".chartvalues" / "config.yaml"
        project_file.parent.mkdir()
        project_file.write_text("serializer: [oops\n", encoding="utf-8")
        result = runner.invoke(cli.cli, ["template", "x"])
        assert result.exit_code == 1
        assert "Error in config file" in result.output


class TestMerge:
    """merge command."""

    def test_merge_layers(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """Values files and --set layer over the defaults in order."""
        defaults = write_file("values.yaml", DEFAULTS)
        prod = write_file("prod.yaml", "replicas: 3\nimage:\n  tag: '1.25'\n")

        result = runner.invoke(
            cli.cli,
            ["merge", str(defaults), "-f", str(prod), "--set", "replicas=5", "--set", "image.pullPolicy=Always"],
        )

        assert result.exit_code == 0, result.output
        merged = _yaml.safe_load(result.output)
        assert merged == {
            "replicas": 5,
            "image": {"repository": "nginx", "tag": "1.25", "pullPolicy": "Always"},
            "ports": [80],
        }

    def test_merge_json(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """--format json prints JSON."""
        defaults = write_file("values.yaml", DEFAULTS)
        result = runner.invoke(cli.cli, ["merge", str(defaults), "--format", "json"])
        assert result.exit_code == 0, result.output
        assert _json.loads(result.output)["image"]["tag"] == "latest"

    def test_merge_bad_set(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """A malformed --set is a usage error, not a crash."""
        defaults = write_file("values.yaml", DEFAULTS)
        result = runner.invoke(cli.cli, ["merge", str(defaults), "--set", "replicas"])
        assert result.exit_code == 1
        assert "expected path=value" in result.output

    def test_merge_unreadable_nested(
        self, runner: _click_testing.CliRunner, write_file: WriteFile
    ) -> None:
        """Nested text the parser cannot read is reported."""
        defaults = write_file("values.yaml", "owner: @team\nimage:\n  tag: x\n")
        result = runner.invoke(cli.cli, ["merge", str(defaults)])
        assert result.exit_code == 1
        assert "Failed to parse YAML" in result.output

    def test_missing_file(self, runner: _click_testing.CliRunner) -> None:
        """click rejects paths that do not exist."""
        result = runner.invoke(cli.cli, ["merge", "nope.yaml"])
        assert result.exit_code == 2


class TestValidate:
    """validate command."""

    def test_valid(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """Conforming values exit 0."""
        defaults = write_file("values.yaml", DEFAULTS)
        schema = write_file("schema.yaml", SCHEMA)
        result = runner.invoke(cli.cli, ["validate", str(defaults), "--schema", str(schema)])
        assert result.exit_code == 0, result.output
        assert "Values are valid." in result.output

    def test_invalid(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """Errors are tabulated and the exit code is 1."""
        defaults = write_file("values.yaml", DEFAULTS)
        schema = write_file("schema.yaml", SCHEMA)
        result = runner.invoke(
            cli.cli,
            ["validate", str(defaults), "--schema", str(schema), "--set", "replicas=0"],
        )
        assert result.exit_code == 1
        assert "replicas" in result.output
        assert "at least 1" in result.output

    def test_unknown_path_warning(
        self, runner: _click_testing.CliRunner, write_file: WriteFile
    ) -> None:
        """Warnings are printed even when values are valid."""
        defaults = write_file("values.yaml", DEFAULTS)
        schema = write_file("schema.yaml", SCHEMA)
        result = runner.invoke(
            cli.cli,
            ["validate", str(defaults), "--schema", str(schema), "--set", "debug=true"],
        )
        assert result.exit_code == 0, result.output
        assert "Unknown properties: debug" in result.output

    def test_invalid_schema(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """Malformed schemas are reported cleanly."""
        defaults = write_file("values.yaml", DEFAULTS)
        schema = write_file("schema.yaml", "replicas:\n  type: integer\n")
        result = runner.invoke(cli.cli, ["validate", str(defaults), "--schema", str(schema)])
        assert result.exit_code == 1
        assert "Invalid schema for 'replicas'" in result.output


class TestDiff:
    """diff command."""

    def test_diff_json(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """JSON output lists entries with wire names."""
        old = write_file("old.yaml", "a: 1\nb: 2\n")
        new = write_file("new.yaml", "a: 1\nc: 3\n")
        result = runner.invoke(cli.cli, ["diff", str(old), str(new), "--json"])
        assert result.exit_code == 0, result.output
        assert _json.loads(result.output) == [
            {"path": "b", "oldValue": 2, "newValue": None, "type": "removed"},
            {"path": "c", "oldValue": None, "newValue": 3, "type": "added"},
        ]

    def test_diff_table(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """The table shows each changed path."""
        old = write_file("old.yaml", "image:\n  tag: '1.0'\n")
        new = write_file("new.yaml", "image:\n  tag: '1.1'\n")
        result = runner.invoke(cli.cli, ["diff", str(old), str(new)])
        assert result.exit_code == 0, result.output
        assert "image.tag" in result.output
        assert "modified" in result.output

    def test_no_differences(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """Identical files say so."""
        old = write_file("old.yaml", DEFAULTS)
        result = runner.invoke(cli.cli, ["diff", str(old), str(old)])
        assert result.exit_code == 0
        assert "No differences." in result.output


class TestSummaryAndTemplate:
    """summary and template commands."""

    def test_summary(self, runner: _click_testing.CliRunner, write_file: WriteFile) -> None:
        """Counts are shown."""
        defaults = write_file("values.yaml", DEFAULTS)
        overrides = write_file("prod.yaml", "replicas: 2\n")
        result = runner.invoke(cli.cli, ["summary", str(defaults), "-f", str(overrides)])
        assert result.exit_code == 0, result.output
        assert "total_values" in result.output
        assert "user_modified_values" in result.output

    def test_template(self, runner: _click_testing.CliRunner) -> None:
        """The starter file names the chart."""
        result = runner.invoke(cli.cli, ["template", "nginx"])
        assert result.exit_code == 0
        assert result.output.startswith("# Values for nginx\n")


class TestConfigShow:
    """config show command."""

    def test_config_show_yaml(self, runner: _click_testing.CliRunner) -> None:
        """Effective config is printed as YAML."""
        result = runner.invoke(cli.cli, ["config", "show"])
        assert result.exit_code == 0, result.output
        shown = _yaml.safe_load(result.output)
        assert shown["serializer"] == {"indent": 2, "allow_fallback": True}

    def test_config_show_json_with_env(
        self,
        runner: _click_testing.CliRunner,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """Environment overrides are reflected."""
        monkeypatch.setenv("CHARTVALUES_SERIALIZER__INDENT", "4")
        result = runner.invoke(cli.cli, ["config", "show", "--json"])
        assert result.exit_code == 0, result.output
        assert _json.loads(result.output)["serializer"]["indent"] == 4

    def test_config_show_warns_unknown_keys(
        self,
        runner: _click_testing.CliRunner,
        isolated_config: _pathlib.Path,
    ) -> None:
        """Misspelled keys are pointed out."""
        project_file = isolated_config / ".chartvalues" / "config.yaml"
        project_file.parent.mkdir()
        project_file.write_text("serializer:\n  indnet: 4\n", encoding="utf-8")
        result = runner.invoke(cli.cli, ["config", "show", "--json"])
        assert result.exit_code == 0
        assert "serializer.indnet" in result.output
