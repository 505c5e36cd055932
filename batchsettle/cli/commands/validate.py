"""``batchsettle validate PLAN``: check a plan file and show per-asset totals.

Plan files are JSON objects::

    {"recipients": ["0x..", ...], "amounts": [10, ...], "asset_refs": ["native", "0x..", ...]}

``asset_refs`` may be omitted or empty, meaning every entry pays native.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from batchsettle.cli.render import SettlementRenderer
from batchsettle.config import SettleConfig
from batchsettle.core.errors import SettlementError
from batchsettle.models.plan import BatchPlan

console = Console()


def load_plan(path: Path) -> BatchPlan:
    """Read and validate a JSON plan file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("plan file must contain a JSON object")
    for field in ("recipients", "amounts", "asset_refs"):
        if not isinstance(data.get(field) or [], list):
            raise ValueError(f"plan field {field!r} must be a JSON array")
    return BatchPlan.build(
        data.get("recipients") or [],
        data.get("amounts") or [],
        data.get("asset_refs") or [],
    )


def load_plan_or_exit(path: Path) -> BatchPlan:
    """``load_plan`` for commands: print the failure reason and exit 1."""
    if not Path(path).exists():
        console.print(f"[bold red]Plan file not found:[/bold red] {path}")
        raise typer.Exit(code=1)
    try:
        return load_plan(path)
    except (SettlementError, ValidationError, ValueError) as exc:
        console.print(f"[bold red]Invalid plan:[/bold red] {exc}")
        raise typer.Exit(code=1)


def validate_cmd(
    plan_file: Path = typer.Argument(..., help="Path to the JSON plan file."),
) -> None:
    """Validate a batch plan and print the amount required per asset."""
    settings = SettleConfig()
    renderer = SettlementRenderer(console=console, native_symbol=settings.native_symbol)

    plan = load_plan_or_exit(plan_file)

    console.print(renderer.plan_table(plan))
    console.print(renderer.totals_table(plan))
    console.print(
        f"[bold green]Plan is valid:[/bold green] {len(plan)} transfers, "
        f"{len(plan.distinct_assets)} distinct assets."
    )
