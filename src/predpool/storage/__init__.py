"""DuckDB ledger journal."""
