"""Typer-based CLI for typepick."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config, config_manager
from .assembler import apply_omissions
from .errors import TypePickError
from .models import OutputOptions
from .picker import build_query, load_oracle_factory, pick_type

app = typer.Typer(
    help="🔎 typepick: ask the TypeScript type checker what it knows about a location.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    )
):
    """typepick: compiler-verified type facts as JSON."""
    pass


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command("pick")
def pick(
    file: Path = typer.Argument(..., help="TypeScript/JavaScript file to inspect."),
    line: Optional[str] = typer.Option(None, "--line", "-l", help="1-based line number of the target token."),
    column: Optional[str] = typer.Option(None, "--column", "-c", help="1-based column number of the target token."),
    pattern: Optional[str] = typer.Option(None, "--pattern", "--regex", "-p", help="Pattern to match in the file."),
    pattern_flags: Optional[str] = typer.Option(
        None, "--pattern-flags", "--regex-flags", help="Pattern flags, JavaScript letters (global is implied)."
    ),
    index: Optional[str] = typer.Option(None, "--index", "-i", help="Zero-based index of the pattern match (default 0)."),
    project: Optional[str] = typer.Option(None, "--project", help="Path to tsconfig.json or a project directory."),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print JSON output."),
    compact: bool = typer.Option(False, "--compact", help="Emit compact JSON output (overrides --pretty)."),
    omit_diagnostics: bool = typer.Option(False, "--omit-diagnostics", help="Exclude diagnostics from the result."),
    omit_properties: bool = typer.Option(False, "--omit-properties", help="Exclude property summaries from the result."),
    omit_signatures: bool = typer.Option(False, "--omit-signatures", help="Exclude signatures from the result."),
    checker: Optional[str] = typer.Option(
        None, "--checker", help="Oracle factory as 'package.module:callable' (overrides config)."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log resolution steps to stderr."),
):
    """Resolve a location or pattern and print the type facts as JSON.

    Example:
      tpick pick src/user.ts --line 12 --column 7
      tpick pick src/user.ts --pattern "loadUsers\\(" --index 1
    """
    _configure_logging(verbose)
    try:
        query = build_query(
            str(file),
            line=line,
            column=column,
            pattern=pattern,
            flags=pattern_flags,
            index=index,
            project=project,
        )
        factory = load_oracle_factory(checker) if checker else None
        record = pick_type(query, oracle_factory=factory)
    except TypePickError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    record = apply_omissions(record, OutputOptions(
        omit_diagnostics=omit_diagnostics,
        omit_properties=omit_properties,
        omit_signatures=omit_signatures,
    ))
    if compact:
        pretty = False
    if pretty:
        text = json.dumps(record.to_dict(), indent=2, ensure_ascii=False)
    else:
        text = json.dumps(record.to_dict(), separators=(",", ":"), ensure_ascii=False)
    typer.echo(text)


@app.command("show-config")
def show_config():
    """Show the active checker and result limits."""
    table = Table(title="typepick configuration", show_header=False)
    table.add_column("setting", style="cyan")
    table.add_column("value")
    table.add_row("config file", str(config_manager.CONFIG_FILE))
    table.add_row("checker", config.CHECKER_FACTORY or "(not set)")
    table.add_row("signature limit", str(config.SIGNATURE_LIMIT))
    table.add_row("property limit", str(config.PROPERTY_LIMIT))
    table.add_row("declaration limit", str(config.DECLARATION_LIMIT))
    table.add_row("snippet length", str(config.SNIPPET_MAX_LENGTH))
    Console().print(table)


@app.command("set-checker")
def set_checker(
    factory: str = typer.Argument(..., help="Oracle factory as 'package.module:callable'."),
):
    """Persist the oracle factory used when --checker is not given."""
    module_name, sep, attr = factory.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter("Checker factory must look like 'package.module:callable'.")
    if not config_manager.save_checker_config(factory):
        typer.echo(f"Error: could not write {config_manager.CONFIG_FILE}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Checker set to '{factory}' in {config_manager.CONFIG_FILE}")


if __name__ == "__main__":
    app()
