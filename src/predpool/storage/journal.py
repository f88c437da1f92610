"""Ledger event journal - append LedgerEvents to DuckDB and read them back in order."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Iterator

import structlog

from predpool.core.events import LedgerEvent

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

    from predpool.core.engine import Core

log = structlog.get_logger(__name__)

JournalRow = tuple[str, str, int | None, int | None, int, str]


def prepare_event_row(event: LedgerEvent) -> JournalRow:
    """Build a ledger_events row. Large integers survive as JSON numbers."""
    return (
        event.source,
        event.event_type,
        event.condition_id,
        event.receipt_id,
        event.timestamp,
        json.dumps(event.payload),
    )


def append_event(conn: DuckDBPyConnection, event: LedgerEvent) -> None:
    """Append a single event. Prefer append_events_batch for throughput."""
    conn.execute(
        """
        INSERT INTO ledger_events (source, event_type, condition_id, receipt_id, event_ts, payload)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        list(prepare_event_row(event)),
    )


def append_events_batch(conn: DuckDBPyConnection, rows: list[JournalRow]) -> None:
    if not rows:
        return
    conn.executemany(
        """
        INSERT INTO ledger_events (source, event_type, condition_id, receipt_id, event_ts, payload)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        rows,
    )


class JournalSink:
    """EventSink that buffers events and writes them to DuckDB in batches."""

    def __init__(self, conn: DuckDBPyConnection, batch_size: int = 1) -> None:
        self.conn = conn
        self.batch_size = max(1, batch_size)
        self._buffer: list[JournalRow] = []

    def emit(self, event: LedgerEvent) -> None:
        self._buffer.append(prepare_event_row(event))
        if len(self._buffer) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not self._buffer:
            return
        rows, self._buffer = self._buffer, []
        append_events_batch(self.conn, rows)
        log.debug("journal_flushed", rows=len(rows))


def stream_events(
    conn: Any,
    source: str | None = None,
    condition_id: int | None = None,
    event_type: str | None = None,
) -> Iterator[LedgerEvent]:
    """Yield journal events in append order, optionally filtered."""
    conditions = []
    params: list[Any] = []
    if source:
        conditions.append("source = ?")
        params.append(source)
    if condition_id is not None:
        conditions.append("condition_id = ?")
        params.append(condition_id)
    if event_type:
        conditions.append("event_type = ?")
        params.append(event_type)
    where = " AND ".join(conditions) if conditions else "1=1"
    sql = f"SELECT source, event_type, condition_id, receipt_id, event_ts, payload FROM ledger_events WHERE {where} ORDER BY id ASC"
    for src, etype, cid, rid, ts, payload_json in conn.execute(sql, params).fetchall():
        try:
            payload = json.loads(payload_json) if isinstance(payload_json, str) else payload_json
        except (TypeError, json.JSONDecodeError):
            log.warning("journal_bad_payload", source=src, event_type=etype)
            continue
        yield LedgerEvent(
            event_type=etype,
            source=src,
            timestamp=ts,
            condition_id=cid,
            receipt_id=rid,
            payload=payload or {},
        )


def journal_stats(conn: DuckDBPyConnection) -> dict[str, Any]:
    """Return journal statistics: total count, time range, count by event type."""
    total = conn.execute("SELECT COUNT(*) FROM ledger_events").fetchone()[0]
    min_ts, max_ts = conn.execute("SELECT MIN(event_ts), MAX(event_ts) FROM ledger_events").fetchone()
    by_type = conn.execute(
        "SELECT event_type, COUNT(*) AS cnt FROM ledger_events GROUP BY event_type ORDER BY cnt DESC, event_type"
    ).fetchall()
    return {
        "total_events": total,
        "min_event_ts": min_ts,
        "max_event_ts": max_ts,
        "by_type": [{"event_type": r[0], "count": r[1]} for r in by_type],
    }


def snapshot_conditions(conn: DuckDBPyConnection, core: Core) -> int:
    """Upsert every condition of ``core`` into condition_snapshots. Returns row count."""
    now = core.clock.now()
    conditions = core.conditions.all()
    for c in conditions:
        conn.execute(
            """
            INSERT INTO condition_snapshots (source, condition_id, oracle, state, fund_bank_0, fund_bank_1, start_ts, outcome_won, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (source, condition_id) DO UPDATE SET
                state = excluded.state,
                fund_bank_0 = excluded.fund_bank_0,
                fund_bank_1 = excluded.fund_bank_1,
                start_ts = excluded.start_ts,
                outcome_won = excluded.outcome_won,
                updated_at = excluded.updated_at
            """,
            [
                core.core_id,
                c.condition_id,
                c.oracle,
                c.state.value,
                str(c.fund_bank[0]),
                str(c.fund_bank[1]),
                c.start_timestamp,
                c.outcome_won,
                now,
            ],
        )
    return len(conditions)
