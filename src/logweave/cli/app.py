"""logweave CLI: Typer-based command interface."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from logweave.config import LogweaveConfig
from logweave.core.levels import level_name, parse_level
from logweave.core.registry import Registry, new
from logweave.errors import LogweaveError
from logweave.logging_setup import setup_logging

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="logweave",
    help="Build and inspect named loggers from a logging configuration.",
    no_args_is_help=True,
)
console = Console()

# Global state set by the callback
_verbose: bool = False


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """logweave: declarative appenders, levels, and named loggers."""
    global _verbose
    _verbose = verbose


def _build(config_path: Path) -> Registry:
    """Load the config and build a registry, exiting 1 on configuration errors."""
    try:
        config = LogweaveConfig.load(config_path)
        setup_logging(config.diagnostics, verbose=_verbose)
        return new(config)
    except LogweaveError as exc:
        logger.debug("Configuration failed", exc_info=True)
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        if not _verbose:
            console.print("[dim]Run with --verbose for full traceback[/dim]")
        raise typer.Exit(1)


@app.command()
def check(
    config_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Path to the TOML config"),
) -> None:
    """Validate a configuration and show its appenders and declared loggers."""
    registry = _build(config_path)
    try:
        appenders = Table(title="Appenders")
        appenders.add_column("Name")
        appenders.add_column("Type")
        appenders.add_column("Encoder")
        for appender in registry.appenders:
            appenders.add_row(appender.name, appender.type, type(appender.encoder).__name__)
        console.print(appenders)

        loggers = Table(title="Loggers")
        loggers.add_column("Name")
        loggers.add_column("Level", justify="center")
        loggers.add_column("Appenders")
        loggers.add_row(
            "[dim](root)[/dim]",
            registry.root.level.name,
            ", ".join(registry.root.appender_refs) or "[dim]none[/dim]",
        )
        for name in registry.loggers:
            handle = registry.get_logger(name)
            loggers.add_row(name, _handle_level(handle), ", ".join(a.name for a in handle.appenders))
        console.print(loggers)

        console.print(f"[green]OK[/green] {len(registry.appenders)} appender(s), {len(registry.loggers)} logger(s)")
    finally:
        registry.close()


@app.command()
def show(
    config_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Path to the TOML config"),
    name: str = typer.Argument(help="Logger name"),
) -> None:
    """Show the effective level and appenders of a logger."""
    registry = _build(config_path)
    try:
        declared = name in registry
        handle = registry.get_logger(name)
        origin = "declared" if declared else "implicit (root)"
        console.print(f"[bold]{name}[/bold] [dim]{origin}[/dim]")
        console.print(f"  level: {_handle_level(handle)}")
        console.print(f"  appenders: {', '.join(a.name for a in handle.appenders) or 'none'}")
    finally:
        registry.close()


@app.command()
def emit(
    config_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Path to the TOML config"),
    name: str = typer.Argument(help="Logger name"),
    message: str = typer.Argument(help="Message to log"),
    level: str = typer.Option("info", "--level", "-l", help="Severity of the record"),
) -> None:
    """Log one record through a named logger."""
    try:
        levelno = parse_level(level).level
    except LogweaveError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    registry = _build(config_path)
    try:
        handle = registry.get_logger(name)
        if not handle.isEnabledFor(levelno):
            console.print(f"[yellow]{name} drops {level_name(levelno)} records[/yellow]")
        handle.log(levelno, message)
    finally:
        registry.close()


def _handle_level(handle) -> str:
    levels = {core.level.name for core in handle.core.cores}
    return ", ".join(sorted(levels)) or "-"


if __name__ == "__main__":
    app()
