"""Condition ledger - per-condition reserves and the Created -> Resolved | Canceled state machine."""

from __future__ import annotations

from typing import Sequence

import structlog

from predpool.core.errors import (
    ConditionAlreadyCreated,
    ConditionAlreadyResolved,
    ConditionNotExists,
    ConditionNotStarted,
    IncorrectTimestamp,
    SameOutcomes,
    WrongOutcome,
    ZeroOdds,
)
from predpool.models import Condition, ConditionState
from predpool.pricing.fixed_point import UINT64_MAX, add, checked, mul_div, sub, to_u128
from predpool.pricing.odds import MIN_BANK

log = structlog.get_logger(__name__)


class ConditionLedger:
    """Owns every condition of one core. Role checks are done by the caller; this enforces legality."""

    def __init__(self) -> None:
        self._conditions: dict[int, Condition] = {}
        # (oracle, oracle_condition_id) -> internal condition_id
        self._oracle_ids: dict[tuple[str, int], int] = {}
        self._last_condition_id = 0
        self.all_stopped = False

    def __len__(self) -> int:
        return len(self._conditions)

    # ------------------------------------------------------------------
    # Lookup

    def get(self, condition_id: int) -> Condition:
        condition = self._conditions.get(condition_id)
        if condition is None:
            raise ConditionNotExists(condition_id=condition_id)
        return condition

    def oracle_condition_id(self, oracle: str, oracle_condition_id: int) -> int:
        """Internal id for an oracle's external id, 0 if unknown."""
        return self._oracle_ids.get((oracle, oracle_condition_id), 0)

    def get_by_oracle(self, oracle: str, oracle_condition_id: int) -> Condition:
        condition_id = self.oracle_condition_id(oracle, oracle_condition_id)
        if condition_id == 0:
            raise ConditionNotExists(oracle=oracle, oracle_condition_id=oracle_condition_id)
        return self._conditions[condition_id]

    def active(self) -> list[Condition]:
        return [c for c in self._conditions.values() if c.state == ConditionState.CREATED]

    def all(self) -> list[Condition]:
        return list(self._conditions.values())

    # ------------------------------------------------------------------
    # Creation

    def prepare(
        self,
        *,
        oracle: str,
        oracle_condition_id: int,
        scope_id: int,
        odds: Sequence[int],
        outcomes: Sequence[int],
        timestamp: int,
        ipfs_hash: str,
        reinforcement: int,
        margin: int,
        now: int,
    ) -> Condition:
        """Validate a new condition and build it without storing it."""
        if len(odds) != 2 or len(outcomes) != 2:
            raise WrongOutcome("binary conditions only", outcomes=list(outcomes))
        if timestamp <= now or timestamp > UINT64_MAX:
            raise IncorrectTimestamp(timestamp=timestamp, now=now)
        if odds[0] <= 0 or odds[1] <= 0:
            raise ZeroOdds(odds=list(odds))
        if outcomes[0] == outcomes[1]:
            raise SameOutcomes(outcome=outcomes[0])
        if outcomes[0] == 0 or outcomes[1] == 0:
            raise WrongOutcome(outcomes=list(outcomes))
        if (oracle, oracle_condition_id) in self._oracle_ids:
            raise ConditionAlreadyCreated(oracle=oracle, oracle_condition_id=oracle_condition_id)

        weight = add(odds[0], odds[1])
        bank1 = to_u128(mul_div(reinforcement, odds[0], weight))
        # remainder goes to bank0 so the banks always sum to the reinforcement
        bank0 = to_u128(sub(reinforcement, bank1))
        if bank0 < MIN_BANK or bank1 < MIN_BANK:
            raise ZeroOdds("reinforcement too small for pool weights", reinforcement=reinforcement)
        return Condition(
            condition_id=self._last_condition_id + 1,
            oracle_condition_id=oracle_condition_id,
            oracle=oracle,
            scope_id=scope_id,
            outcomes=(outcomes[0], outcomes[1]),
            fund_bank=[bank0, bank1],
            reinforcement=reinforcement,
            margin=margin,
            start_timestamp=timestamp,
            ipfs_hash=ipfs_hash,
        )

    def insert(self, condition: Condition) -> Condition:
        if condition.condition_id != self._last_condition_id + 1:
            raise ConditionAlreadyCreated(condition_id=condition.condition_id)
        self._last_condition_id = condition.condition_id
        self._conditions[condition.condition_id] = condition
        self._oracle_ids[(condition.oracle, condition.oracle_condition_id)] = condition.condition_id
        return condition

    # ------------------------------------------------------------------
    # Transitions

    def _require_created(self, condition: Condition) -> None:
        if condition.state != ConditionState.CREATED:
            raise ConditionAlreadyResolved(condition_id=condition.condition_id, state=condition.state.value)

    def check_resolvable(self, condition: Condition, outcome_win: int, now: int) -> int:
        """Validate a resolution and return the winning outcome index."""
        if now < condition.start_timestamp:
            raise ConditionNotStarted(condition_id=condition.condition_id, start=condition.start_timestamp)
        self._require_created(condition)
        index = condition.outcome_index(outcome_win)
        if index is None:
            raise WrongOutcome(condition_id=condition.condition_id, outcome=outcome_win)
        return index

    def mark_resolved(self, condition: Condition, outcome_win: int) -> None:
        condition.outcome_won = outcome_win
        condition.state = ConditionState.RESOLVED

    def check_cancelable(self, condition: Condition) -> None:
        self._require_created(condition)

    def mark_canceled(self, condition: Condition) -> None:
        condition.state = ConditionState.CANCELED

    def shift(self, condition_id: int, new_timestamp: int) -> Condition:
        condition = self.get(condition_id)
        self._require_created(condition)
        if new_timestamp <= 0:
            raise IncorrectTimestamp(timestamp=new_timestamp)
        condition.start_timestamp = checked(new_timestamp, UINT64_MAX)
        return condition

    def stop(self, condition_id: int, flag: bool) -> Condition:
        condition = self.get(condition_id)
        self._require_created(condition)
        condition.stopped = flag
        return condition

    def stop_all(self, flag: bool) -> None:
        self.all_stopped = flag

    def is_stopped(self, condition: Condition) -> bool:
        return self.all_stopped or condition.stopped
