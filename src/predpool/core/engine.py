"""Core - condition ledger + pricing + bet accounting behind oracle/maintainer/pool capability checks.

A Core is the replaceable logic layer. The liquidity pool routes stakes and
payouts into it and receives the reserve back when a condition terminates.
Every mutating method validates first and mutates last, under one lock, so a
failed call leaves no trace.
"""

from __future__ import annotations

from threading import RLock
from typing import Protocol, Sequence

import structlog

from predpool.core.access import Role, require
from predpool.core.bets import BetBook
from predpool.core.clock import Clock, SystemClock
from predpool.core.conditions import ConditionLedger
from predpool.core.errors import (
    AmountMustNotBeZero,
    BigDifference,
    CantAcceptBet,
    ConditionAlreadyResolved,
    ConditionStarted,
    ConditionStopped,
    DeadlineExceeded,
    OnlyMaintainer,
    OnlyOracle,
    OnlyPool,
    SmallOdds,
    WrongDataFormat,
    WrongOutcome,
)
from predpool.core.events import EventSink, LedgerEvent, NullSink
from predpool.models import Bet, Condition, ConditionState, PayoutView
from predpool.pricing.fixed_point import ODDS_SCALE, add, div, to_u128
from predpool.pricing.odds import odds_from_banks, payout_for
from predpool.registry.dependencies import OutcomeDependencyRegistry

log = structlog.get_logger(__name__)

DEFAULT_MAX_BANKS_RATIO = 10_000


class PoolLink(Protocol):
    """What a core needs from the liquidity pool."""

    address: str
    lock: RLock

    def lock_reserve(self, core_id: str, amount: int) -> None: ...

    def add_reserve(self, init_reserve: int, final_reserve: int, oracle: str) -> None: ...


class Core:
    """One versioned logic instance. ``core_id`` tags its events and the receipts it issues."""

    def __init__(
        self,
        core_id: str,
        *,
        oracles: Role,
        maintainers: Role,
        registry: OutcomeDependencyRegistry,
        clock: Clock | None = None,
        events: EventSink | None = None,
        max_banks_ratio: int = DEFAULT_MAX_BANKS_RATIO,
        odds_scale: int = ODDS_SCALE,
    ) -> None:
        self.core_id = core_id
        self.oracles = oracles
        self.maintainers = maintainers
        self.registry = registry
        self.clock = clock or SystemClock()
        self.events = events or NullSink()
        self.max_banks_ratio = max_banks_ratio
        self.odds_scale = odds_scale
        self.conditions = ConditionLedger()
        self.bets = BetBook()
        self.pool: PoolLink | None = None
        self._lock = RLock()

    def __repr__(self) -> str:
        return f"Core({self.core_id!r}, conditions={len(self.conditions)}, bets={len(self.bets)})"

    # ------------------------------------------------------------------
    # Wiring and roles

    def set_pool(self, pool: PoolLink) -> None:
        # one lock for the pool and all of its cores: operations are totally ordered
        self.pool = pool
        self._lock = pool.lock

    def is_oracle(self, identity: str) -> bool:
        return self.oracles.has(identity)

    def is_maintainer(self, identity: str) -> bool:
        return self.maintainers.has(identity)

    def _require_pool(self, caller: str) -> PoolLink:
        if self.pool is None or caller != self.pool.address:
            raise OnlyPool(identity=caller)
        return self.pool

    def _emit(self, event_type: str, condition_id: int | None = None, receipt_id: int | None = None, **payload: object) -> None:
        self.events.emit(
            LedgerEvent(
                event_type=event_type,
                source=self.core_id,
                timestamp=self.clock.now(),
                condition_id=condition_id,
                receipt_id=receipt_id,
                payload=payload,
            )
        )

    # ------------------------------------------------------------------
    # Maintainer configuration

    def change_max_banks_ratio(self, caller: str, ratio: int) -> None:
        require(self.maintainers, caller, OnlyMaintainer)
        if ratio <= 0:
            raise WrongDataFormat("max banks ratio must be positive", ratio=ratio)
        with self._lock:
            self.max_banks_ratio = ratio
        log.info("max_banks_ratio_changed", core=self.core_id, ratio=ratio)
        self._emit("MaxBanksRatioChanged", ratio=ratio)

    def update_reinforcements(self, caller: str, flat: Sequence[int]) -> None:
        require(self.maintainers, caller, OnlyMaintainer)
        with self._lock:
            n = self.registry.update_reinforcements(flat)
        self._emit("ReinforcementsUpdated", entries=n)

    def update_margins(self, caller: str, flat: Sequence[int]) -> None:
        require(self.maintainers, caller, OnlyMaintainer)
        with self._lock:
            n = self.registry.update_margins(flat)
        self._emit("MarginsUpdated", entries=n)

    def get_reinforcement(self, key: int) -> int:
        return self.registry.get_reinforcement(key)

    def get_margin(self, key: int) -> int:
        return self.registry.get_margin(key)

    # ------------------------------------------------------------------
    # Condition lifecycle

    def create_condition(
        self,
        caller: str,
        oracle_condition_id: int,
        scope_id: int,
        odds: Sequence[int],
        outcomes: Sequence[int],
        timestamp: int,
        ipfs_hash: str = "",
    ) -> int:
        """Create a condition for the calling oracle and lock its reinforcement. Returns the internal id."""
        require(self.oracles, caller, OnlyOracle)
        with self._lock:
            key = outcomes[0] if outcomes else 0
            reinforcement = self.registry.get_reinforcement(key)
            margin = self.registry.get_margin(key)
            condition = self.conditions.prepare(
                oracle=caller,
                oracle_condition_id=oracle_condition_id,
                scope_id=scope_id,
                odds=odds,
                outcomes=outcomes,
                timestamp=timestamp,
                ipfs_hash=ipfs_hash,
                reinforcement=reinforcement,
                margin=margin,
                now=self.clock.now(),
            )
            if self.pool is not None:
                self.pool.lock_reserve(self.core_id, reinforcement)
            self.conditions.insert(condition)
        log.info(
            "condition_created",
            core=self.core_id,
            condition_id=condition.condition_id,
            oracle=caller,
            oracle_condition_id=oracle_condition_id,
            reinforcement=reinforcement,
            margin=margin,
        )
        self._emit(
            "ConditionCreated",
            condition_id=condition.condition_id,
            oracle=caller,
            oracle_condition_id=oracle_condition_id,
            timestamp=timestamp,
            fund_bank=list(condition.fund_bank),
        )
        return condition.condition_id

    def resolve_condition(self, caller: str, oracle_condition_id: int, outcome_win: int) -> None:
        """Seal the winning outcome and hand the condition's reserve back to the pool."""
        require(self.oracles, caller, OnlyOracle)
        with self._lock:
            condition = self.conditions.get_by_oracle(caller, oracle_condition_id)
            index = self.conditions.check_resolvable(condition, outcome_win, self.clock.now())
            final_reserve = condition.total_bank() - condition.payouts[index]
            if self.pool is not None:
                self.pool.add_reserve(condition.reinforcement, final_reserve, caller)
            self.conditions.mark_resolved(condition, outcome_win)
        log.info(
            "condition_resolved",
            core=self.core_id,
            condition_id=condition.condition_id,
            outcome_win=outcome_win,
            final_reserve=final_reserve,
        )
        self._emit(
            "ConditionResolved",
            condition_id=condition.condition_id,
            oracle=caller,
            outcome_win=outcome_win,
            final_reserve=final_reserve,
        )

    def cancel_by_oracle(self, caller: str, oracle_condition_id: int) -> None:
        require(self.oracles, caller, OnlyOracle)
        with self._lock:
            condition = self.conditions.get_by_oracle(caller, oracle_condition_id)
            self._cancel(condition, caller)

    def cancel_by_maintainer(self, caller: str, condition_id: int) -> None:
        """Cancel by internal id (see ``oracle_condition_ids``)."""
        require(self.maintainers, caller, OnlyMaintainer)
        with self._lock:
            condition = self.conditions.get(condition_id)
            self._cancel(condition, caller)

    def _cancel(self, condition: Condition, caller: str) -> None:
        self.conditions.check_cancelable(condition)
        if self.pool is not None:
            self.pool.add_reserve(condition.reinforcement, condition.reinforcement, condition.oracle)
        self.conditions.mark_canceled(condition)
        log.info("condition_canceled", core=self.core_id, condition_id=condition.condition_id, by=caller)
        self._emit("ConditionCanceled", condition_id=condition.condition_id, by=caller)

    def shift(self, caller: str, condition_id: int, new_timestamp: int) -> None:
        require(self.maintainers, caller, OnlyMaintainer)
        with self._lock:
            self.conditions.shift(condition_id, new_timestamp)
        log.info("condition_shifted", core=self.core_id, condition_id=condition_id, timestamp=new_timestamp)
        self._emit("ConditionShifted", condition_id=condition_id, timestamp=new_timestamp)

    def stop_condition(self, caller: str, condition_id: int, flag: bool) -> None:
        require(self.maintainers, caller, OnlyMaintainer)
        with self._lock:
            self.conditions.stop(condition_id, flag)
        log.info("condition_stopped", core=self.core_id, condition_id=condition_id, stopped=flag)
        self._emit("ConditionStopped", condition_id=condition_id, flag=flag)

    def stop_all_conditions(self, caller: str, flag: bool) -> None:
        require(self.maintainers, caller, OnlyMaintainer)
        with self._lock:
            self.conditions.stop_all(flag)
        log.info("all_conditions_stopped", core=self.core_id, stopped=flag)
        self._emit("AllConditionsStopped", flag=flag)

    # ------------------------------------------------------------------
    # Views

    def get_condition(self, condition_id: int) -> Condition:
        return self.conditions.get(condition_id).model_copy(deep=True)

    def get_condition_funds(self, condition_id: int) -> tuple[int, int]:
        bank = self.conditions.get(condition_id).fund_bank
        return bank[0], bank[1]

    def get_condition_reinforcement(self, condition_id: int) -> int:
        return self.conditions.get(condition_id).reinforcement

    def oracle_condition_ids(self, oracle: str, oracle_condition_id: int) -> int:
        return self.conditions.oracle_condition_id(oracle, oracle_condition_id)

    def has_locked_conditions(self) -> bool:
        """True while any condition of this core is still Created."""
        return bool(self.conditions.active())

    def get_bet_info(self, receipt_id: int) -> Bet:
        return self.bets.get(receipt_id).model_copy()

    def calculate_odds(self, condition_id: int, amount: int, outcome: int) -> int:
        """Odds a stake of ``amount`` on ``outcome`` would be filled at now."""
        condition = self.conditions.get(condition_id)
        index = condition.outcome_index(outcome)
        if index is None:
            raise WrongOutcome(condition_id=condition_id, outcome=outcome)
        return odds_from_banks(
            condition.fund_bank[0],
            condition.fund_bank[1],
            amount,
            index,
            condition.margin,
            self.odds_scale,
        )

    # ------------------------------------------------------------------
    # Stakes and payouts (pool only)

    def put_bet(
        self,
        caller: str,
        condition_id: int,
        receipt_id: int,
        amount: int,
        outcome: int,
        deadline: int,
        min_odds: int,
    ) -> int:
        """Accept a stake routed by the pool. Returns the locked odds."""
        self._require_pool(caller)
        with self._lock:
            now = self.clock.now()
            condition = self.conditions.get(condition_id)
            if condition.state != ConditionState.CREATED:
                raise ConditionAlreadyResolved(condition_id=condition_id, state=condition.state.value)
            if self.conditions.is_stopped(condition):
                raise ConditionStopped(condition_id=condition_id)
            if now >= condition.start_timestamp:
                raise ConditionStarted(condition_id=condition_id, start=condition.start_timestamp)
            if now > deadline:
                raise DeadlineExceeded(condition_id=condition_id, deadline=deadline)
            if amount <= 0:
                raise AmountMustNotBeZero(amount=amount)
            to_u128(amount)
            index = condition.outcome_index(outcome)
            if index is None:
                raise WrongOutcome(condition_id=condition_id, outcome=outcome)
            bank = condition.fund_bank
            if div(add(bank[index], amount), bank[1 - index]) >= self.max_banks_ratio:
                raise BigDifference(condition_id=condition_id, amount=amount, max_banks_ratio=self.max_banks_ratio)

            odds = odds_from_banks(bank[0], bank[1], amount, index, condition.margin, self.odds_scale)
            if odds < min_odds:
                raise SmallOdds(odds=odds, min_odds=min_odds)

            payout = payout_for(amount, odds, self.odds_scale)
            new_bank = to_u128(add(bank[index], amount))
            new_payouts = to_u128(add(condition.payouts[index], payout))
            # a winning side is covered by the reinforcement and the stakes against it
            cover = add(condition.reinforcement, condition.total_net_bets[1 - index])
            if new_payouts > cover:
                raise CantAcceptBet(condition_id=condition_id, payouts=new_payouts)

            self.bets.record(
                Bet(
                    receipt_id=receipt_id,
                    condition_id=condition_id,
                    amount=amount,
                    outcome=outcome,
                    odds=odds,
                    created_at=now,
                )
            )
            condition.fund_bank[index] = new_bank
            condition.payouts[index] = new_payouts
            condition.total_net_bets[index] += amount
        log.info(
            "bet_accepted",
            core=self.core_id,
            condition_id=condition_id,
            receipt_id=receipt_id,
            amount=amount,
            outcome=outcome,
            odds=odds,
        )
        self._emit(
            "NewBet",
            condition_id=condition_id,
            receipt_id=receipt_id,
            outcome=outcome,
            amount=amount,
            odds=odds,
            fund_bank=list(condition.fund_bank),
        )
        return odds

    def view_payout(self, receipt_id: int) -> PayoutView:
        bet = self.bets.get(receipt_id)
        return self.bets.view(receipt_id, self.conditions.get(bet.condition_id))

    def resolve_payout(self, caller: str, receipt_id: int) -> int:
        """Authorise the payout for a receipt exactly once. Returns the amount."""
        self._require_pool(caller)
        with self._lock:
            bet = self.bets.get(receipt_id)
            amount = self.bets.settle(receipt_id, self.conditions.get(bet.condition_id))
        self._emit("BetSettled", condition_id=bet.condition_id, receipt_id=receipt_id, amount=amount)
        return amount
