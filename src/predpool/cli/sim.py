"""Sim subcommand: run a scripted condition lifecycle into the journal."""

from __future__ import annotations

import typer

from predpool.core.access import RoleSet
from predpool.core.clock import ManualClock
from predpool.pool.stand import prepare_stand
from predpool.simulation.runner import StakeSpec, run_scenario
from predpool.storage.db import get_connection, init_schema
from predpool.storage.journal import JournalSink, snapshot_conditions

app = typer.Typer(help="Scripted condition lifecycles")


@app.command("run")
def run_sim(
    ctx: typer.Context,
    bets: int = typer.Option(10, "--bets", "-n", min=1, help="Number of stakes"),
    stake: int = typer.Option(100, "--stake", help="Stake size in whole tokens"),
    winner: int = typer.Option(1, "--winner", "-w", min=1, max=2, help="Winning outcome (1 or 2)"),
    liquidity: int = typer.Option(2_000_000, "--liquidity", help="Pool liquidity in whole tokens"),
    journal: bool = typer.Option(True, "--journal/--no-journal", help="Write events to the journal"),
) -> None:
    """Create one condition, alternate stakes on both outcomes, resolve and pay out."""
    settings = ctx.obj["settings"]
    unit = 10**settings.token_decimals
    clock = ManualClock()
    conn = None
    sink = None
    if journal and settings.journal_enabled:
        conn = get_connection(settings.db_path)
        init_schema(conn)
        sink = JournalSink(conn, batch_size=100)
    try:
        core, pool = prepare_stand(
            settings,
            oracles=RoleSet("oracle", ["oracle"]),
            maintainers=RoleSet("maintainer", ["maintainer"]),
            liquidity=liquidity * unit,
            clock=clock,
            events=sink,
        )
        stakes = [StakeSpec(bettor=f"bettor-{i}", amount=stake * unit, outcome=1 + i % 2) for i in range(bets)]
        result = run_scenario(
            core,
            pool,
            clock,
            oracle="oracle",
            maintainer="maintainer",
            oracle_condition_id=1,
            stakes=stakes,
            outcome_win=winner,
        )
        typer.echo(f"Condition: {result.condition_id}  Winner: {result.outcome_win}")
        typer.echo(f"Accepted: {result.accepted}  Rejected: {result.rejected}")
        typer.echo(f"Staked: {result.total_staked / unit:.4f}  Paid: {result.total_paid / unit:.4f}")
        typer.echo(f"Oracle reward: {result.oracle_reward / unit:.4f}  DAO reward: {result.dao_reward / unit:.4f}")
        typer.echo(f"Pool PnL: {result.pool_pnl / unit:.4f}")
        if sink is not None:
            sink.flush()
            snapshot_conditions(conn, core)
    finally:
        if conn is not None:
            conn.close()
