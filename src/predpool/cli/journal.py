"""Journal subcommand: stats, export, show."""

from __future__ import annotations

import typer

from predpool.storage.db import get_connection, init_schema
from predpool.storage.export import export_events_to_parquet
from predpool.storage.journal import journal_stats, stream_events

app = typer.Typer(help="Ledger event journal export and statistics")


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    """Show journal statistics (counts, time range, by event type)."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        s = journal_stats(conn)
        typer.echo(f"Total events: {s['total_events']}")
        typer.echo(f"Min event_ts: {s.get('min_event_ts')}")
        typer.echo(f"Max event_ts: {s.get('max_event_ts')}")
        if s.get("by_type"):
            typer.echo("By event type:")
            for row in s["by_type"]:
                typer.echo(f"  {row['event_type']}  {row['count']}")
    finally:
        conn.close()


@app.command("show")
def show(
    ctx: typer.Context,
    source: str | None = typer.Option(None, "--source", "-s", help="Filter by core id or pool"),
    condition: int | None = typer.Option(None, "--condition", "-c", help="Filter by condition id"),
) -> None:
    """Print journal events in order."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        for ev in stream_events(conn, source=source, condition_id=condition):
            typer.echo(f"{ev.timestamp}  {ev.source}  {ev.event_type}  cond={ev.condition_id}  receipt={ev.receipt_id}  {ev.payload}")
    finally:
        conn.close()


@app.command("export")
def export(
    ctx: typer.Context,
    source: str | None = typer.Option(None, "--source", "-s", help="Filter by core id"),
    output: str = typer.Option("ledger_events.parquet", "--output", "-o", help="Output path"),
) -> None:
    """Export journal events to Parquet."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        count = export_events_to_parquet(conn, output, source=source)
        typer.echo(f"Exported {count} events to {output}")
    finally:
        conn.close()
