"""Condition - one binary-outcome market backed by the pool."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ConditionState(str, Enum):
    CREATED = "created"
    RESOLVED = "resolved"
    CANCELED = "canceled"


class Condition(BaseModel):
    """Per-condition reserves, lifecycle and the parameters captured at creation."""

    condition_id: int = Field(..., ge=1)  # internal sequential id
    oracle_condition_id: int = Field(..., ge=0)
    oracle: str
    scope_id: int = 0
    outcomes: tuple[int, int]
    fund_bank: list[int] = Field(default_factory=lambda: [0, 0])
    payouts: list[int] = Field(default_factory=lambda: [0, 0])
    total_net_bets: list[int] = Field(default_factory=lambda: [0, 0])
    reinforcement: int = Field(..., ge=0)
    margin: int = Field(..., ge=0)
    start_timestamp: int = Field(..., ge=1)
    state: ConditionState = ConditionState.CREATED
    stopped: bool = False
    outcome_won: int | None = None
    ipfs_hash: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.state != ConditionState.CREATED

    def outcome_index(self, outcome: int) -> int | None:
        """Index of outcome in this condition, or None if it is not one of its two outcomes."""
        if outcome == self.outcomes[0]:
            return 0
        if outcome == self.outcomes[1]:
            return 1
        return None

    def total_bank(self) -> int:
        return self.fund_bank[0] + self.fund_bank[1]
