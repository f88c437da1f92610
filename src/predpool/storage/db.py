"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
-- Sequence for auto-increment IDs
CREATE SEQUENCE IF NOT EXISTS ledger_event_seq START 1;

-- Ledger event journal (append-only): condition lifecycle, bets, payouts, configuration
CREATE TABLE IF NOT EXISTS ledger_events (
    id              BIGINT PRIMARY KEY DEFAULT nextval('ledger_event_seq'),
    source          VARCHAR NOT NULL,
    event_type      VARCHAR NOT NULL,
    condition_id    BIGINT,
    receipt_id      BIGINT,
    event_ts        BIGINT NOT NULL,
    payload         JSON NOT NULL
);

-- Condition state as last seen by a snapshot (one row per core/condition)
CREATE TABLE IF NOT EXISTS condition_snapshots (
    source          VARCHAR NOT NULL,
    condition_id    BIGINT NOT NULL,
    oracle          VARCHAR NOT NULL,
    state           VARCHAR NOT NULL,
    fund_bank_0     VARCHAR NOT NULL,
    fund_bank_1     VARCHAR NOT NULL,
    start_ts        BIGINT NOT NULL,
    outcome_won     BIGINT,
    updated_at      BIGINT NOT NULL,
    PRIMARY KEY (source, condition_id)
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager."""
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and sequences if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
