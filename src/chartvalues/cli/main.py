"""
Main CLI entry point for chartvalues.

Provides the command-line interface using Click, with Rich for tables and
highlighted output.
"""

import contextlib as _contextlib
import json as _json
import logging as _logging
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.syntax as _rich_syntax
import rich.table as _rich_table
import yaml as _yaml

import chartvalues
import chartvalues.config as config
import chartvalues.errors as errors
import chartvalues.processor as processor
import chartvalues.serialization as serialization
import chartvalues.values as values

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_FILE = _click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path)

_values_files_option = _click.option(
    "-f",
    "--values",
    "values_files",
    type=_FILE,
    multiple=True,
    help="Values file to layer over the defaults (repeatable, later wins)",
)
_set_option = _click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="PATH=VALUE",
    help="Override a single value (repeatable, applied after -f files)",
)


@_contextlib.contextmanager
def _cli_errors() -> _typing.Iterator[None]:
    """Turn library errors into ClickException so users see one clean line."""
    try:
        yield
    except (errors.ChartValuesError, config.ConfigFileError) as e:
        raise _click.ClickException(str(e)) from e
    except OSError as e:
        raise _click.ClickException(f"Cannot read file: {e}") from e
    except ValueError as e:
        raise _click.ClickException(str(e)) from e


def _load_settings() -> config.Settings:
    with _cli_errors():
        try:
            return config.Settings()
        except _pydantic.ValidationError as e:
            raise _click.ClickException(f"Invalid configuration: {e}") from e


def _build_processor(
    settings: config.Settings,
    defaults_path: _pathlib.Path,
    *,
    schema_path: _pathlib.Path | None = None,
    values_files: tuple[_pathlib.Path, ...] = (),
    assignments: tuple[str, ...] = (),
) -> processor.ValuesProcessor:
    """Load defaults, schema and user layers into a processor."""
    allow_fallback = settings.serializer.allow_fallback
    with _cli_errors():
        defaults = serialization.load_values_file(defaults_path, allow_fallback=allow_fallback)
        schema_tree = (
            serialization.load_values_file(schema_path, allow_fallback=False)
            if schema_path is not None
            else None
        )
        layers = [
            serialization.load_values_file(path, allow_fallback=allow_fallback)
            for path in values_files
        ]
        layers.append(serialization.parse_set_values(assignments))
        result = processor.ValuesProcessor(defaults, schema_tree, settings=settings)
        result.set_user_values(values.merge_all(*layers))
    return result


def _print_yaml(yaml_text: str) -> None:
    """Print YAML text, highlighted when stdout is a terminal."""
    if _sys.stdout.isatty():
        console = _rich_console.Console()
        console.print(_rich_syntax.Syntax(yaml_text, "yaml", theme="monokai", background_color="default"))
    else:
        _click.echo(yaml_text, nl=not yaml_text.endswith("\n"))


def _print_table(title: str, columns: list[str], rows: list[list[str]]) -> None:
    table = _rich_table.Table(title=title)
    for column in columns:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*row)
    _rich_console.Console().print(table)


def _short(value: _typing.Any) -> str:
    """Compact one-line rendering of a value for table cells."""
    if values.is_missing(value):
        return ""
    return _json.dumps(value, ensure_ascii=False)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(chartvalues.__version__, "-v", "--version", prog_name="chartvalues")
@_click.option("--verbose", is_flag=True, help="Enable debug logging")
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """chartvalues - merge, validate and diff chart values files."""
    settings = _load_settings()
    level = "DEBUG" if verbose else settings.logging.level.upper()
    _logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@_click.argument("defaults", type=_FILE)
@_values_files_option
@_set_option
@_click.option(
    "--format",
    "output_format",
    type=_click.Choice(["text", "json"]),
    default="text",
    help="Output format for the merged values",
)
@_click.pass_context
def merge(
    ctx: _click.Context,
    defaults: _pathlib.Path,
    values_files: tuple[_pathlib.Path, ...],
    assignments: tuple[str, ...],
    output_format: str,
) -> None:
    """Print DEFAULTS merged with values files and --set overrides.

    Examples:
        chartvalues merge values.yaml -f prod.yaml --set replicas=3
        chartvalues merge values.yaml --format json
    """
    settings: config.Settings = ctx.obj["settings"]
    proc = _build_processor(
        settings, defaults, values_files=values_files, assignments=assignments
    )
    if output_format == "json":
        _click.echo(proc.export_to_json())
    else:
        _print_yaml(proc.export_to_yaml())


@cli.command()
@_click.argument("defaults", type=_FILE)
@_click.option("--schema", "schema_path", type=_FILE, required=True, help="Schema file")
@_values_files_option
@_set_option
@_click.pass_context
def validate(
    ctx: _click.Context,
    defaults: _pathlib.Path,
    schema_path: _pathlib.Path,
    values_files: tuple[_pathlib.Path, ...],
    assignments: tuple[str, ...],
) -> None:
    """Validate merged values against a schema.

    Exits with status 1 when any validation error is found.
    """
    settings: config.Settings = ctx.obj["settings"]
    proc = _build_processor(
        settings,
        defaults,
        schema_path=schema_path,
        values_files=values_files,
        assignments=assignments,
    )
    result = proc.process()

    for warning in result.warnings:
        _click.echo(f"Warning: {warning}", err=True)

    if not result.errors:
        _click.echo("Values are valid.")
        return

    _print_table(
        f"{len(result.errors)} validation error(s)",
        ["Path", "Message", "Value"],
        [[e.path, e.message, _short(e.value)] for e in result.errors],
    )
    raise SystemExit(1)


@cli.command()
@_click.argument("old", type=_FILE)
@_click.argument("new", type=_FILE)
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def diff(ctx: _click.Context, old: _pathlib.Path, new: _pathlib.Path, as_json: bool) -> None:
    """Show leaf-level differences between two values files."""
    settings: config.Settings = ctx.obj["settings"]
    old_proc = _build_processor(settings, old)
    new_proc = _build_processor(settings, new)
    entries = old_proc.compare(new_proc)

    if as_json:
        _click.echo(_json.dumps([entry.to_dict() for entry in entries], indent=2))
        return
    if not entries:
        _click.echo("No differences.")
        return
    _print_table(
        f"{len(entries)} change(s)",
        ["Path", "Change", "Old", "New"],
        [
            [e.path, e.kind.value, _short(e.old_value), _short(e.new_value)]
            for e in entries
        ],
    )


@cli.command()
@_click.argument("defaults", type=_FILE)
@_click.option("--schema", "schema_path", type=_FILE, default=None, help="Schema file")
@_values_files_option
@_click.pass_context
def summary(
    ctx: _click.Context,
    defaults: _pathlib.Path,
    schema_path: _pathlib.Path | None,
    values_files: tuple[_pathlib.Path, ...],
) -> None:
    """Show value counts and validation state."""
    settings: config.Settings = ctx.obj["settings"]
    proc = _build_processor(
        settings, defaults, schema_path=schema_path, values_files=values_files
    )
    info = proc.get_summary()
    _print_table(
        "Values summary",
        ["Field", "Value"],
        [[name, str(value)] for name, value in info.to_dict().items()],
    )


@cli.command()
@_click.argument("chart_name")
def template(chart_name: str) -> None:
    """Print a starter values file for CHART_NAME."""
    _click.echo(serialization.minimal_values_template(chart_name), nl=False)


@cli.group(name="config")
def config_cmd() -> None:
    """Configuration management commands."""


@config_cmd.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def config_show(ctx: _click.Context, as_json: bool) -> None:
    """Show effective configuration from all sources.

    Displays the merged configuration from built-in defaults, user config,
    project config and CHARTVALUES_* environment variables.
    """
    settings: config.Settings = ctx.obj["settings"]
    full_config = settings.model_dump(mode="json")

    if as_json:
        _click.echo(_json.dumps(full_config, indent=2))
    else:
        _print_yaml(_yaml.dump(full_config, default_flow_style=False, sort_keys=False))

    extras = settings.collect_all_extra_fields()
    if extras:
        _click.echo(f"Warning: unknown config keys: {', '.join(sorted(extras))}", err=True)


def main() -> None:
    """Entry point for the chartvalues console script."""
    cli()


if __name__ == "__main__":
    main()
