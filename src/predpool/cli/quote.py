"""Quote subcommand: margin, banks."""

from __future__ import annotations

import typer

from predpool.core.errors import PredPoolError
from predpool.pricing.odds import margin_adjusted_odds, odds_from_banks

app = typer.Typer(help="Offline odds quotes (integer fixed point)")


def _fmt(odds: int, scale: int) -> str:
    return f"{odds}  ({odds / scale:.6f})"


@app.command("margin")
def margin(
    ctx: typer.Context,
    odds: int = typer.Argument(..., help="Fair odds at odds scale (e.g. 1730000000 for 1.73)"),
    margin: int = typer.Argument(..., help="Margin at odds scale (e.g. 50000000 for 5%)"),
) -> None:
    """Apply the bookmaker margin to fair odds."""
    scale = ctx.obj["settings"].odds_scale
    try:
        result = margin_adjusted_odds(odds, margin, scale)
    except PredPoolError as e:
        typer.echo(f"Error: {e.code}")
        raise typer.Exit(1)
    typer.echo(_fmt(result, scale))


@app.command("banks")
def banks(
    ctx: typer.Context,
    bank0: int = typer.Argument(..., help="Reserve of outcome 0"),
    bank1: int = typer.Argument(..., help="Reserve of outcome 1"),
    amount: int = typer.Argument(..., help="Stake amount"),
    outcome_index: int = typer.Option(0, "--outcome-index", "-i", min=0, max=1, help="0 or 1"),
    margin: int | None = typer.Option(None, "--margin", "-m", help="Margin at odds scale (default from config)"),
) -> None:
    """Quote the odds a stake would be filled at against two reserves."""
    settings = ctx.obj["settings"]
    scale = settings.odds_scale
    m = settings.default_margin if margin is None else margin
    try:
        result = odds_from_banks(bank0, bank1, amount, outcome_index, m, scale)
    except PredPoolError as e:
        typer.echo(f"Error: {e.code}")
        raise typer.Exit(1)
    typer.echo(_fmt(result, scale))
