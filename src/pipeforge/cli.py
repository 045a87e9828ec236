# src/pipeforge/cli.py
"""pipeforge Command Line Interface.

Entry point for the pipeforge CLI tool.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import typer
import yaml
from pydantic import ValidationError

from pipeforge import __version__
from pipeforge.contracts.errors import SettingsError
from pipeforge.contracts.results import ExecutionOutcome, PipeValidationResult
from pipeforge.core.config import PipeforgeSettings, load_settings
from pipeforge.operators.registry import OperatorRegistry, register_builtin_operators

__all__ = ["app"]

# Module-level singleton: built-in operators register exactly once per process.
_registry_cache: OperatorRegistry | None = None


def _get_registry() -> OperatorRegistry:
    """Get the operator registry with all built-in operators (singleton)."""
    global _registry_cache

    if _registry_cache is None:
        _registry_cache = register_builtin_operators(OperatorRegistry())
    return _registry_cache


@dataclass
class _CliState:
    settings: PipeforgeSettings = field(default_factory=PipeforgeSettings)


app = typer.Typer(
    name="pipeforge",
    help="pipeforge: validate and execute node-based data pipes.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pipeforge version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Raises:
        typer.Exit: If an explicit env_file does not exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)
    return load_dotenv(override=False)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file (PIPEFORGE_* env vars override it).",
    ),
    no_dotenv: bool = typer.Option(False, "--no-dotenv", help="Skip loading .env file."),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    json_logs: bool | None = typer.Option(
        None,
        "--json-logs/--console-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
) -> None:
    """pipeforge: validate and execute node-based data pipes."""
    from pipeforge.core.logging import configure_logging

    # .env must be loaded before settings so PIPEFORGE_* values apply
    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)

    try:
        loaded = load_settings(settings.expanduser() if settings is not None else None)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except SettingsError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    try:
        configure_logging(
            json_output=loaded.logging.json_output if json_logs is None else json_logs,
            level=log_level or loaded.logging.level,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    ctx.obj = _CliState(settings=loaded)


def _state(ctx: typer.Context) -> _CliState:
    return ctx.obj if isinstance(ctx.obj, _CliState) else _CliState()


def _read_document(path: Path, max_bytes: int | None = None) -> Any:
    """Read a JSON or YAML document, enforcing an optional size ceiling.

    Raises:
        typer.Exit: If the file is missing, too large, or unparseable.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(1) from None

    if max_bytes is not None and len(raw) > max_bytes:
        typer.echo(f"Pipe definition too large (max {max_bytes // 1024}KB)", err=True)
        raise typer.Exit(1)

    text = raw.decode("utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        typer.echo(f"Error: Could not parse {path}: {e}", err=True)
        raise typer.Exit(1) from None


def _parse_inputs(pairs: list[str]) -> dict[str, str]:
    inputs: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            typer.echo(f"Error: Invalid --input '{pair}' (expected NODE=VALUE)", err=True)
            raise typer.Exit(1)
        inputs[key.strip()] = value
    return inputs


def _print_validation_errors(result: PipeValidationResult) -> None:
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    content = Text()
    for issue in result.errors:
        content.append(f"[{issue.type.value}] ", style="yellow bold")
        content.append(issue.message, style="white")
        if issue.node_id:
            content.append(f"  (node {issue.node_id})", style="dim")
        content.append("\n")

    Console(stderr=True).print(
        Panel(content, title="[red bold]Pipe definition is invalid[/]", border_style="red", padding=(0, 1))
    )


def _print_outcome(outcome: ExecutionOutcome) -> None:
    from rich.console import Console
    from rich.table import Table

    console = Console()
    table = Table(title="Execution")
    table.add_column("Node")
    table.add_column("Operator")
    table.add_column("Status")
    table.add_column("Time (ms)", justify="right")
    for node_id in outcome.execution_order:
        step = outcome.intermediate_results.get(node_id)
        if step is None:
            continue
        style = "green" if step.error is None else "red"
        table.add_row(step.label, step.type, f"[{style}]{step.status.value}[/]", f"{step.execution_time:.1f}")
    console.print(table)

    if outcome.succeeded:
        console.print(f"[green bold]Completed[/] in {outcome.total_execution_time:.1f} ms")
        console.print_json(json.dumps(outcome.final_result, default=str))
    else:
        console.print(f"[red bold]Failed:[/] {outcome.error}")


@app.command()
def validate(
    ctx: typer.Context,
    pipe: Path = typer.Argument(..., help="Pipe definition (JSON or YAML)."),
    config_check: bool = typer.Option(
        True,
        "--config-check/--no-config-check",
        help="Also validate each operator's config.",
    ),
) -> None:
    """Validate a pipe definition without running it."""
    from pipeforge.core.dag import PipeValidator

    settings = _state(ctx).settings
    definition = _read_document(pipe, settings.execution.max_definition_bytes)
    validator = PipeValidator(_get_registry(), max_operators=settings.execution.max_nodes)

    result = validator.validate_full(definition) if config_check else validator.validate(definition)
    if not result.valid:
        _print_validation_errors(result)
        raise typer.Exit(1)
    typer.echo("Pipe definition is valid")


@app.command()
def run(
    ctx: typer.Context,
    pipe: Path = typer.Argument(..., help="Pipe definition (JSON or YAML)."),
    inputs: list[str] = typer.Option(
        [],
        "--input",
        "-i",
        help="User input value as NODE=VALUE (node id or input label). Repeatable.",
    ),
    target: str | None = typer.Option(
        None,
        "--target",
        "-t",
        help="Run only this node and its upstream dependencies.",
    ),
    output_json: bool = typer.Option(False, "--json", help="Print the outcome as JSON."),
) -> None:
    """Validate and execute a pipe."""
    from pipeforge.core.dag import PipeValidator
    from pipeforge.engine import PipeExecutor

    settings = _state(ctx).settings
    definition = _read_document(pipe, settings.execution.max_definition_bytes)
    user_inputs = _parse_inputs(inputs)
    registry = _get_registry()

    validator = PipeValidator(registry, max_operators=settings.execution.max_nodes)
    result = validator.validate_full(definition)
    if result.valid and target is None:
        result = validator.preflight(definition)
    if not result.valid:
        if output_json:
            typer.echo(json.dumps(result.to_dict()))
        else:
            _print_validation_errors(result)
        raise typer.Exit(1)

    executor = PipeExecutor(registry, settings)
    if target is None:
        outcome = executor.execute(definition, user_inputs=user_inputs)
    else:
        outcome = executor.execute_selected(definition, target, user_inputs=user_inputs)

    if output_json:
        typer.echo(json.dumps(outcome.to_dict(), default=str))
    else:
        _print_outcome(outcome)
    if not outcome.succeeded:
        raise typer.Exit(1)


@app.command()
def operators() -> None:
    """List available operators by category."""
    registry = _get_registry()
    aliases: dict[str, list[str]] = {}
    for alias, target in registry.list_aliases().items():
        aliases.setdefault(target, []).append(alias)

    for category, members in registry.by_category().items():
        typer.echo(f"\n{category.value.upper()}:")
        for operator in members:
            extra = f" (alias: {', '.join(sorted(aliases[operator.type]))})" if operator.type in aliases else ""
            typer.echo(f"  {operator.type:20} - {operator.description}{extra}")
    typer.echo()


@app.command()
def schema(
    data: Path = typer.Argument(..., help="Sample data (JSON or YAML)."),
    flat: bool = typer.Option(False, "--flat", help="Print dotted field paths only."),
) -> None:
    """Print the schema extracted from sample data."""
    from pipeforge.core.schema_extractor import SchemaExtractor, flatten_schema

    extracted = SchemaExtractor().extract(_read_document(data))
    if flat:
        for path in flatten_schema(extracted):
            typer.echo(path)
        return
    typer.echo(json.dumps(extracted.to_dict(), indent=2, default=str))


if __name__ == "__main__":
    app()
