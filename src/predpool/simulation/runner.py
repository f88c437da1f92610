"""Scenario runner: one condition, a sequence of stakes, resolution and payouts on a manual clock."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from predpool.core.clock import ManualClock
from predpool.core.engine import Core
from predpool.core.errors import EconomicError, NoWinNoPrize
from predpool.pool.router import LiquidityPool

log = structlog.get_logger(__name__)

ONE_HOUR = 3600


@dataclass
class StakeSpec:
    bettor: str
    amount: int
    outcome: int


@dataclass
class ScenarioResult:
    """Aggregate outcome of a scenario run."""

    condition_id: int
    outcome_win: int
    accepted: int = 0
    rejected: int = 0
    total_staked: int = 0
    total_paid: int = 0
    oracle_reward: int = 0
    dao_reward: int = 0
    reserve_before: int = 0
    reserve_after: int = 0
    odds: list[int] = field(default_factory=list)

    @property
    def pool_pnl(self) -> int:
        return self.reserve_after - self.reserve_before


def run_scenario(
    core: Core,
    pool: LiquidityPool,
    clock: ManualClock,
    *,
    oracle: str,
    maintainer: str,
    oracle_condition_id: int,
    stakes: list[StakeSpec],
    outcomes: tuple[int, int] = (1, 2),
    outcome_win: int = 1,
) -> ScenarioResult:
    """Drive create -> stakes -> resolve -> withdraw. Stakes rejected by a risk guard are counted, not raised."""
    start = clock.now()
    reserve_before = pool.reserve
    condition_id = core.create_condition(oracle, oracle_condition_id, 0, (1, 1), outcomes, start + ONE_HOUR, "sim")
    result = ScenarioResult(condition_id=condition_id, outcome_win=outcome_win, reserve_before=reserve_before)

    receipts: list[tuple[str, int]] = []
    for stake in stakes:
        try:
            receipt_id, odds = pool.bet(stake.bettor, condition_id, stake.amount, stake.outcome, start + ONE_HOUR, 0)
        except EconomicError as e:
            result.rejected += 1
            log.info("sim_stake_rejected", bettor=stake.bettor, amount=stake.amount, error=e.code)
            continue
        result.accepted += 1
        result.total_staked += stake.amount
        result.odds.append(odds)
        receipts.append((stake.bettor, receipt_id))

    clock.advance(ONE_HOUR)
    core.resolve_condition(oracle, oracle_condition_id, outcome_win)

    for bettor, receipt_id in receipts:
        try:
            result.total_paid += pool.withdraw_payout(bettor, receipt_id)
        except NoWinNoPrize:
            continue

    result.oracle_reward = pool.claim_oracle_reward(oracle)
    result.dao_reward = pool.claim_dao_reward(maintainer)
    result.reserve_after = pool.reserve
    return result
