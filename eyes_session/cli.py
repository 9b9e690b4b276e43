"""CLI entry point for the visual checkpoint SDK."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from eyes_session.models.config import BatchConfig, EyesConfig
from eyes_session.models.test_result import TestResults
from eyes_session.session.errors import NewTestError, build_test_error

console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _mask(secret: str | None) -> str:
    if not secret:
        return "[red]not set[/red]"
    return secret[:4] + "..." if len(secret) > 4 else "****"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual checkpoint test session tools"""
    setup_logging(verbose)


@cli.command()
@click.option("--batch", "-b", "batch_name", default=None, help="Default batch name")
def init(batch_name: str | None) -> None:
    """Create a default configuration file."""
    config_path = Path("eyes-config.json")
    if config_path.exists():
        if not click.confirm("eyes-config.json already exists. Overwrite?"):
            return

    cfg = EyesConfig(batch=BatchConfig(name=batch_name) if batch_name else None)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nSet your api key before running tests:")
    console.print("  [blue]export APPLITOOLS_API_KEY=...[/blue]")


@cli.command()
@click.option("--config", "-c", default="eyes-config.json", help="Config file path")
def config(config: str) -> None:
    """Show the effective configuration."""
    try:
        cfg = EyesConfig.load(config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Run 'eyes-session init' to create a default config.")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid config: {escape(str(e))}[/red]")
        sys.exit(1)

    table = Table(title="Eyes Configuration")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row("Server URL", cfg.server_url)
    table.add_row("API key", _mask(cfg.api_key))
    table.add_row("Disabled", str(cfg.is_disabled))
    table.add_row("Match level", cfg.default_match_settings.match_level.value)
    table.add_row("Match timeout", f"{cfg.default_match_timeout_ms}ms")
    table.add_row("Failure report", cfg.failure_report.value)
    table.add_row("Save new tests", str(cfg.save_new_tests))
    table.add_row("Save failed tests", str(cfg.save_failed_tests))
    if cfg.batch:
        table.add_row("Batch", cfg.batch.name or cfg.batch.id or "")
    if cfg.branch_name:
        table.add_row("Branch", cfg.branch_name)
    console.print(table)


@cli.command()
@click.argument("results_file", type=click.Path(exists=True, dir_okay=False))
def results(results_file: str) -> None:
    """Show saved test results; exits 1 when the test did not pass."""
    try:
        test_results = TestResults.load(results_file)
    except ValidationError as e:
        console.print(f"[red]Invalid results file: {escape(str(e))}[/red]")
        sys.exit(1)

    if test_results.is_passed:
        status = "[green]PASSED[/green]"
    elif test_results.is_aborted:
        status = "[red]ABORTED[/red]"
    elif test_results.is_new:
        status = "[yellow]NEW[/yellow]"
    else:
        status = "[red]FAILED[/red]"

    table = Table(title=f"{test_results.test_name} ({test_results.app_name})")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Status", status)
    table.add_row("Steps", str(test_results.steps))
    table.add_row("Matches", f"[green]{test_results.matches}[/green]")
    table.add_row("Mismatches", f"[red]{test_results.mismatches}[/red]")
    table.add_row("Missing", f"[yellow]{test_results.missing}[/yellow]")
    table.add_row("Saved", str(test_results.is_saved))
    table.add_row("Session", test_results.session_id or "-")
    console.print(table)
    if test_results.url:
        console.print(f"  Details: [blue]{test_results.url}[/blue]")

    error = build_test_error(test_results, test_results.test_name, test_results.app_name)
    if error is not None:
        # New baselines need review but are not regressions
        color = "yellow" if isinstance(error, NewTestError) else "red"
        console.print(f"[{color}]{error.header}[/{color}]")
        sys.exit(1)


if __name__ == "__main__":
    cli()
