"""Export the ledger journal to Parquet."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def export_events_to_parquet(
    conn: DuckDBPyConnection,
    output_path: str | Path,
    source: str | None = None,
) -> int:
    """Export ledger_events to a Parquet file. Optional filter by source (core id). Returns row count."""
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path_str = str(path).replace("'", "''")
    if source:
        conn.execute(
            f"COPY (SELECT * FROM ledger_events WHERE source = ?) TO '{path_str}' (FORMAT PARQUET)",
            [source],
        )
        count = conn.execute("SELECT COUNT(*) FROM ledger_events WHERE source = ?", [source]).fetchone()[0]
    else:
        conn.execute(f"COPY (SELECT * FROM ledger_events) TO '{path_str}' (FORMAT PARQUET)")
        count = conn.execute("SELECT COUNT(*) FROM ledger_events").fetchone()[0]
    return count
