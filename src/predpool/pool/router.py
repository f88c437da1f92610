"""Liquidity pool routing layer - stable entry point in front of a replaceable Core.

The pool routes stakes to the active core, routes payouts to whichever core
issued the receipt, locks and releases condition reinforcement, and applies
the fee split on resolution. Switching the active core is gated on every
condition of the current core being terminal.
"""

from __future__ import annotations

from threading import RLock

import structlog

from predpool.core.access import Role, require
from predpool.core.clock import Clock, SystemClock
from predpool.core.engine import Core
from predpool.core.errors import (
    AmountMustNotBeZero,
    BetNotExists,
    CoreRetired,
    NotEnoughLiquidity,
    OnlyBetOwner,
    OnlyMaintainer,
    PaymentLocked,
    PredPoolError,
)
from predpool.core.events import EventSink, LedgerEvent, NullSink
from predpool.models import PayoutView
from predpool.pool.receipts import ReceiptToken
from predpool.rewards.distribution import RewardDistributor, RewardSplit

log = structlog.get_logger(__name__)


class LiquidityPool:
    """Routes stakes/payouts to cores and keeps the reserve and reward balances."""

    def __init__(
        self,
        core: Core,
        *,
        maintainers: Role,
        address: str = "pool",
        liquidity: int = 0,
        rewards: RewardDistributor | None = None,
        clock: Clock | None = None,
        events: EventSink | None = None,
    ) -> None:
        self.address = address
        self.maintainers = maintainers
        self.lock = RLock()
        self.receipts = ReceiptToken(address)
        self.rewards = rewards or RewardDistributor()
        self.clock = clock or SystemClock()
        self.events = events or NullSink()
        self.reserve = liquidity
        self.locked_reserve = 0
        self.cores: dict[str, Core] = {}
        # receipt id -> id of the core that accepted the stake
        self._receipt_core: dict[int, str] = {}
        self.core = core
        self._attach(core)

    def _attach(self, core: Core) -> None:
        core.set_pool(self)
        self.cores[core.core_id] = core

    def _emit(self, event_type: str, condition_id: int | None = None, receipt_id: int | None = None, **payload: object) -> None:
        self.events.emit(
            LedgerEvent(
                event_type=event_type,
                source=self.address,
                timestamp=self.clock.now(),
                condition_id=condition_id,
                receipt_id=receipt_id,
                payload=payload,
            )
        )

    # ------------------------------------------------------------------
    # Reserve (called by cores)

    def add_liquidity(self, amount: int) -> None:
        """Top up the free reserve. Share accounting is handled outside the engine."""
        if amount <= 0:
            raise AmountMustNotBeZero(amount=amount)
        with self.lock:
            self.reserve += amount
        log.info("liquidity_added", amount=amount, reserve=self.reserve)

    def lock_reserve(self, core_id: str, amount: int) -> None:
        with self.lock:
            if core_id != self.core.core_id:
                raise CoreRetired(core=core_id, active=self.core.core_id)
            if amount > self.reserve:
                raise NotEnoughLiquidity(requested=amount, reserve=self.reserve)
            self.reserve -= amount
            self.locked_reserve += amount

    def add_reserve(self, init_reserve: int, final_reserve: int, oracle: str) -> RewardSplit:
        """Release a terminated condition's reinforcement and take fees on any profit."""
        with self.lock:
            split = self.rewards.split(init_reserve, final_reserve)
            self.locked_reserve -= init_reserve
            self.reserve += split.to_pool
            self.rewards.accrue(oracle, split)
        if split.profit:
            log.info(
                "rewards_distributed",
                oracle=oracle,
                profit=split.profit,
                oracle_reward=split.oracle_reward,
                dao_reward=split.dao_reward,
            )
        return split

    # ------------------------------------------------------------------
    # Bettor entry points

    def bet(
        self,
        caller: str,
        condition_id: int,
        amount: int,
        outcome: int,
        deadline: int,
        min_odds: int,
    ) -> tuple[int, int]:
        """Stake on the active core. Returns (receipt_id, locked odds)."""
        with self.lock:
            receipt_id = self.receipts.next_id
            try:
                odds = self.core.put_bet(self.address, condition_id, receipt_id, amount, outcome, deadline, min_odds)
            except PredPoolError as e:
                log.warning("bet_rejected", condition_id=condition_id, amount=amount, outcome=outcome, error=e.code)
                raise
            minted = self.receipts.mint(self.address, caller)
            self._receipt_core[minted] = self.core.core_id
        return minted, odds

    def core_of(self, receipt_id: int) -> Core:
        core_id = self._receipt_core.get(receipt_id)
        if core_id is None:
            raise BetNotExists(receipt_id=receipt_id)
        return self.cores[core_id]

    def view_payout(self, receipt_id: int) -> PayoutView:
        return self.core_of(receipt_id).view_payout(receipt_id)

    def withdraw_payout(self, caller: str, receipt_id: int) -> int:
        """Pay the receipt's current owner. Fails with NoWinNoPrize on a second attempt."""
        with self.lock:
            if self.receipts.owner_of(receipt_id) != caller:
                raise OnlyBetOwner(identity=caller, receipt_id=receipt_id)
            core = self.core_of(receipt_id)
            amount = core.resolve_payout(self.address, receipt_id)
        log.info("payout_withdrawn", receipt_id=receipt_id, core=core.core_id, owner=caller, amount=amount)
        self._emit("BetterWin", receipt_id=receipt_id, owner=caller, amount=amount, core=core.core_id)
        return amount

    # ------------------------------------------------------------------
    # Rewards

    def claim_dao_reward(self, caller: str) -> int:
        require(self.maintainers, caller, OnlyMaintainer)
        with self.lock:
            amount = self.rewards.claim_dao()
        log.info("dao_reward_claimed", by=caller, amount=amount)
        return amount

    def claim_oracle_reward(self, caller: str) -> int:
        """Zero and return the caller's accrued oracle reward."""
        with self.lock:
            amount = self.rewards.claim_oracle(caller)
        log.info("oracle_reward_claimed", oracle=caller, amount=amount)
        return amount

    def change_oracle_reward(self, caller: str, fee: int) -> None:
        require(self.maintainers, caller, OnlyMaintainer)
        with self.lock:
            self.rewards.set_oracle_fee(fee)
        log.info("oracle_reward_changed", fee=fee)
        self._emit("OracleRewardChanged", fee=fee)

    def change_dao_reward(self, caller: str, fee: int) -> None:
        require(self.maintainers, caller, OnlyMaintainer)
        with self.lock:
            self.rewards.set_dao_fee(fee)
        log.info("dao_reward_changed", fee=fee)
        self._emit("DaoRewardChanged", fee=fee)

    # ------------------------------------------------------------------
    # Core migration

    def change_core(self, caller: str, new_core: Core) -> None:
        """Route new conditions and stakes to ``new_core``. Every current condition must be terminal."""
        require(self.maintainers, caller, OnlyMaintainer)
        with self.lock:
            if self.core.has_locked_conditions():
                raise PaymentLocked(core=self.core.core_id, active=len(self.core.conditions.active()))
            if new_core.core_id in self.cores and self.cores[new_core.core_id] is not new_core:
                raise PaymentLocked("core id already used", core=new_core.core_id)
            old = self.core
            self._attach(new_core)
            self.core = new_core
        log.info("core_changed", old=old.core_id, new=new_core.core_id)
        self._emit("CoreChanged", old=old.core_id, new=new_core.core_id)
