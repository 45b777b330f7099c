from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, dump_config
from ..core import ConversionError, ConversionService
from ..models import Diagnostic
from ..settings import load_effective_config

console = Console()

app = typer.Typer(help="Convert ad-blocking filter rules into Safari content blocker JSON")


def _load_config(path: Path | None) -> AppConfig:
    return load_effective_config(path)


@app.command()
def convert(
    file: Path,
    output: Path | None = typer.Option(None, "--output", "-o", help="Where to write the JSON"),
    limit: int | None = typer.Option(None, "--limit", help="Rule ceiling, 0 for unlimited"),
    show_errors: bool = typer.Option(False, "--show-errors", help="List every rule that failed"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    service = ConversionService(cfg)
    try:
        converted = service.convert_file(file, output=output, limit=limit)
    except ConversionError as exc:
        console.print(f"[red]Conversion failed[/red]: {exc.code} - {exc}")
        raise typer.Exit(1) from exc

    result = converted.result
    table = Table(title="Conversion summary")
    table.add_column("Converted")
    table.add_column("Errors")
    table.add_column("Over limit")
    table.add_row(str(result.converted_count), str(result.error_count), "yes" if result.over_limit else "no")
    console.print(table)
    console.print(f"[green]Success[/green]: {converted.summary}")
    if converted.errors_path:
        console.print(f"Errors written to: {converted.errors_path}")
    if show_errors and result.errors:
        _print_errors(list(result.errors))


def _print_errors(errors: list[Diagnostic]) -> None:
    table = Table(title="Rejected rules")
    table.add_column("Code", no_wrap=True)
    table.add_column("Rule")
    table.add_column("Cause")
    for item in errors:
        table.add_row(item.code.value, item.rule_text or "-", item.message)
    console.print(table)


@app.command()
def line(
    rule: str,
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Convert one rule and print the resulting JSON object."""

    service = ConversionService(_load_config(config))
    errors: list[Diagnostic] = []
    converted = service.convert_line(rule, errors)
    if errors:
        console.print(f"[red]{errors[0].code.value}[/red]: {errors[0].message}")
        raise typer.Exit(1)
    if converted is None:
        console.print("Comment or empty line, nothing to convert.")
        raise typer.Exit()
    console.print_json(json.dumps(converted.to_dict()))


@app.command()
def serve(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Run the local HTTP API."""

    import uvicorn

    from ..api import create_app

    cfg = _load_config(config)
    try:
        api = create_app(config, require_enabled=True)
    except RuntimeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    uvicorn.run(api, host=cfg.api.host, port=cfg.api.port)


@app.command("config")
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    console.print_json(dump_config(_load_config(config)))


if __name__ == "__main__":
    app()
