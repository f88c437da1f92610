"""Core: condition ledger, bet accounting, roles, clock, events, errors."""
