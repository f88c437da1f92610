"""Bet accounting - stake records and the one-time payout authorisation."""

from __future__ import annotations

import structlog

from predpool.core.errors import BetNotExists, ConditionNotStarted, NoWinNoPrize
from predpool.models import Bet, Condition, ConditionState, PayoutView
from predpool.pricing.odds import payout_for

log = structlog.get_logger(__name__)


def payout_of(bet: Bet, condition: Condition) -> PayoutView:
    """What the receipt would pay right now. Not yet terminal -> ConditionNotStarted."""
    if condition.state == ConditionState.CREATED:
        raise ConditionNotStarted(condition_id=condition.condition_id, receipt_id=bet.receipt_id)
    if condition.state == ConditionState.CANCELED:
        return PayoutView(receipt_id=bet.receipt_id, is_win=True, amount=bet.amount)
    if bet.outcome == condition.outcome_won:
        return PayoutView(receipt_id=bet.receipt_id, is_win=True, amount=payout_for(bet.amount, bet.odds))
    return PayoutView(receipt_id=bet.receipt_id, is_win=False, amount=0)


class BetBook:
    """Stake records of one core, keyed by receipt id."""

    def __init__(self) -> None:
        self._bets: dict[int, Bet] = {}

    def __len__(self) -> int:
        return len(self._bets)

    def __contains__(self, receipt_id: int) -> bool:
        return receipt_id in self._bets

    def get(self, receipt_id: int) -> Bet:
        bet = self._bets.get(receipt_id)
        if bet is None:
            raise BetNotExists(receipt_id=receipt_id)
        return bet

    def record(self, bet: Bet) -> Bet:
        if bet.receipt_id in self._bets:
            raise BetNotExists("receipt already used", receipt_id=bet.receipt_id)
        self._bets[bet.receipt_id] = bet
        return bet

    def for_condition(self, condition_id: int) -> list[Bet]:
        return [b for b in self._bets.values() if b.condition_id == condition_id]

    def view(self, receipt_id: int, condition: Condition) -> PayoutView:
        bet = self.get(receipt_id)
        view = payout_of(bet, condition)
        if bet.payed:
            return PayoutView(receipt_id=receipt_id, is_win=view.is_win, amount=0)
        return view

    def settle(self, receipt_id: int, condition: Condition) -> int:
        """Authorise the payout once and flag the bet. Returns the amount owed."""
        bet = self.get(receipt_id)
        view = payout_of(bet, condition)
        if bet.payed or view.amount == 0:
            raise NoWinNoPrize(receipt_id=receipt_id, payed=bet.payed)
        bet.payed = True
        log.debug("bet_settled", receipt_id=receipt_id, amount=view.amount)
        return view.amount
