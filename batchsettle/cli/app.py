"""Main Typer application: registers all CLI commands.

Entry point: ``batchsettle`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from batchsettle.cli.commands.demo import demo_cmd
from batchsettle.cli.commands.disburse import disburse_cmd
from batchsettle.cli.commands.validate import validate_cmd
from batchsettle.config import SettleConfig
from batchsettle.core.production_guard import (
    ProductionConfigError,
    enforce_production_constraints,
)

app = typer.Typer(
    name="batchsettle",
    help="batchsettle: atomic batch disbursement and delegated batch escrow.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="validate", help="Validate a JSON batch plan.")(validate_cmd)
app.command(name="disburse", help="Simulate an immediate batch transfer.")(disburse_cmd)
app.command(name="demo", help="Run the reference settlement scenarios.")(demo_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Override BATCHSETTLE_LOG_LEVEL for this run."
    ),
) -> None:
    """Configure logging and run the production guard before any command."""
    settings = SettleConfig()
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        enforce_production_constraints(settings)
    except ProductionConfigError as exc:
        Console(stderr=True).print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
