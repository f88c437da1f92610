"""Fee and reward distribution: split a resolved condition's profit into oracle, DAO and pool shares."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

import structlog

from predpool.core.errors import WrongFee
from predpool.pricing.fixed_point import FEE_SCALE, mul_div

log = structlog.get_logger(__name__)

DEFAULT_ORACLE_FEE = 10_000_000  # 1%
DEFAULT_DAO_FEE = 90_000_000  # 9%


@dataclass(frozen=True)
class RewardSplit:
    """Outcome of one resolution. ``to_pool`` is what returns to the pool's free reserve."""

    profit: int
    oracle_reward: int
    dao_reward: int
    to_pool: int


class RewardDistributor:
    """Holds the fee percentages and the accrued, not yet claimed, balances."""

    def __init__(self, oracle_fee: int = DEFAULT_ORACLE_FEE, dao_fee: int = DEFAULT_DAO_FEE) -> None:
        self._check_fees(oracle_fee, dao_fee)
        self.oracle_fee = oracle_fee
        self.dao_fee = dao_fee
        self.dao_accrued = 0
        self.oracle_accrued: dict[str, int] = defaultdict(int)

    @staticmethod
    def _check_fees(oracle_fee: int, dao_fee: int) -> None:
        if oracle_fee < 0 or dao_fee < 0 or oracle_fee + dao_fee > FEE_SCALE:
            raise WrongFee(oracle_fee=oracle_fee, dao_fee=dao_fee)

    def set_oracle_fee(self, fee: int) -> None:
        self._check_fees(fee, self.dao_fee)
        self.oracle_fee = fee

    def set_dao_fee(self, fee: int) -> None:
        self._check_fees(self.oracle_fee, fee)
        self.dao_fee = fee

    def split(self, init_reserve: int, final_reserve: int) -> RewardSplit:
        """Fees apply to profit only; a loss goes back to the pool untouched."""
        if final_reserve <= init_reserve:
            return RewardSplit(profit=0, oracle_reward=0, dao_reward=0, to_pool=final_reserve)
        profit = final_reserve - init_reserve
        oracle_reward = mul_div(profit, self.oracle_fee, FEE_SCALE)
        dao_reward = mul_div(profit, self.dao_fee, FEE_SCALE)
        return RewardSplit(
            profit=profit,
            oracle_reward=oracle_reward,
            dao_reward=dao_reward,
            to_pool=final_reserve - oracle_reward - dao_reward,
        )

    def accrue(self, oracle: str, split: RewardSplit) -> None:
        self.oracle_accrued[oracle] += split.oracle_reward
        self.dao_accrued += split.dao_reward
        log.debug("rewards_accrued", oracle=oracle, oracle_reward=split.oracle_reward, dao_reward=split.dao_reward)

    def claim_oracle(self, oracle: str) -> int:
        """Zero and return the oracle's balance. A second claim returns 0."""
        return self.oracle_accrued.pop(oracle, 0)

    def claim_dao(self) -> int:
        amount, self.dao_accrued = self.dao_accrued, 0
        return amount
