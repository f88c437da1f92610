"""Stakes through the pool: guards, locked odds, settlement and receipts."""

import pytest

from conftest import MAINTAINER, ONE_HOUR, ORACLE, OUTCOME_LOSE, OUTCOME_WIN, TOKEN
from predpool.core.errors import (
    AmountMustNotBeZero,
    BetNotExists,
    BigDifference,
    CantAcceptBet,
    ConditionAlreadyResolved,
    ConditionNotExists,
    ConditionNotStarted,
    ConditionStarted,
    DeadlineExceeded,
    NoWinNoPrize,
    OnlyBetOwner,
    OnlyMaintainer,
    OnlyPool,
    SmallOdds,
    WrongOutcome,
)

STAKE = 100 * TOKEN


def test_bet_locks_odds_and_mints_receipt(stand):
    condition_id = stand.create()
    receipt_id, odds = stand.bet("alice", condition_id, STAKE)
    assert (receipt_id, odds) == (1, 1_904_761_904)
    assert stand.pool.receipts.owner_of(receipt_id) == "alice"

    bet = stand.core.get_bet_info(receipt_id)
    assert bet.amount == STAKE
    assert bet.outcome == OUTCOME_WIN
    assert bet.odds == odds
    assert not bet.payed

    condition = stand.core.get_condition(condition_id)
    assert condition.fund_bank == [10_100 * TOKEN, 10_000 * TOKEN]
    assert condition.payouts == [190_476_190_400_000_000_000, 0]
    assert condition.total_net_bets == [STAKE, 0]

    event = stand.events.of_type("NewBet")[0]
    assert event.receipt_id == receipt_id
    assert event.payload["odds"] == odds


def test_second_stake_prices_against_moved_reserves(stand):
    condition_id = stand.create()
    stand.bet("alice", condition_id, STAKE, OUTCOME_WIN)
    _, odds = stand.bet("bob", condition_id, STAKE, OUTCOME_LOSE)
    assert odds == 1_913_807_265


def test_quote_matches_fill(stand):
    condition_id = stand.create()
    quote = stand.core.calculate_odds(condition_id, 3_000 * TOKEN, OUTCOME_LOSE)
    with pytest.raises(SmallOdds):
        stand.bet("alice", condition_id, 3_000 * TOKEN, OUTCOME_LOSE, min_odds=quote + 1)
    _, odds = stand.bet("alice", condition_id, 3_000 * TOKEN, OUTCOME_LOSE, min_odds=quote)
    assert odds == quote


def test_bet_guards(stand):
    condition_id = stand.create()
    deadline = stand.clock.now() + 10
    with pytest.raises(ConditionNotExists):
        stand.bet("alice", 99, STAKE)
    with pytest.raises(AmountMustNotBeZero):
        stand.bet("alice", condition_id, 0)
    with pytest.raises(WrongOutcome):
        stand.bet("alice", condition_id, STAKE, outcome=3)
    with pytest.raises(DeadlineExceeded):
        stand.pool.bet("alice", condition_id, STAKE, OUTCOME_WIN, stand.clock.now() - 1, 0)
    with pytest.raises(OnlyPool):
        stand.core.put_bet("alice", condition_id, 1, STAKE, OUTCOME_WIN, deadline, 0)
    # rejected stakes leave no trace
    assert stand.pool.receipts.total_minted == 0
    assert stand.core.get_condition_funds(condition_id) == (10_000 * TOKEN, 10_000 * TOKEN)


def test_no_stakes_after_start(stand):
    condition_id = stand.create()
    stand.clock.advance(ONE_HOUR)
    with pytest.raises(ConditionStarted):
        stand.bet("alice", condition_id, STAKE)


def test_deadline_is_a_started_error(stand):
    condition_id = stand.create()
    with pytest.raises(ConditionStarted):
        stand.pool.bet("alice", condition_id, STAKE, OUTCOME_WIN, stand.clock.now() - 1, 0)


def test_no_stakes_on_terminal_condition(stand):
    condition_id = stand.create()
    stand.core.cancel_by_oracle(ORACLE, 1)
    with pytest.raises(ConditionAlreadyResolved):
        stand.bet("alice", condition_id, STAKE)


def test_big_difference_until_ratio_is_raised(stand):
    condition_id = stand.create()
    stand.core.change_max_banks_ratio(MAINTAINER, 2)
    # (10_000 + 10_000) // 10_000 hits the ratio
    with pytest.raises(BigDifference):
        stand.bet("alice", condition_id, 10_000 * TOKEN)
    with pytest.raises(OnlyMaintainer):
        stand.core.change_max_banks_ratio(ORACLE, 3)
    stand.core.change_max_banks_ratio(MAINTAINER, 3)
    _, odds = stand.bet("alice", condition_id, 10_000 * TOKEN)
    assert odds == 1_453_749_596


def test_huge_stake_exceeds_ratio(stand):
    condition_id = stand.create()
    with pytest.raises(BigDifference):
        stand.bet("whale", condition_id, 100_000_000 * TOKEN)


def test_single_stake_beyond_cover(stand):
    condition_id = stand.create()
    assert stand.core.calculate_odds(condition_id, 7_000_000 * TOKEN, OUTCOME_WIN) == 1_000_039_410
    with pytest.raises(CantAcceptBet):
        stand.bet("adr1", condition_id, 7_000_000 * TOKEN)
    assert stand.core.get_condition(condition_id).payouts == [0, 0]


def test_cant_accept_bet_when_payouts_exceed_cover(stand):
    condition_id = stand.create()
    for _ in range(6):
        stand.bet("alice", condition_id, 2_000 * TOKEN)
    before = stand.core.get_condition(condition_id)
    with pytest.raises(CantAcceptBet):
        stand.bet("alice", condition_id, 2_000 * TOKEN)
    after = stand.core.get_condition(condition_id)
    assert after.fund_bank == before.fund_bank
    assert after.payouts == before.payouts
    assert after.payouts[0] <= after.reinforcement + after.total_net_bets[1]


def test_opposing_stakes_add_cover(stand):
    condition_id = stand.create()
    for _ in range(6):
        stand.bet("alice", condition_id, 2_000 * TOKEN)
    stand.bet("bob", condition_id, 3_000 * TOKEN, OUTCOME_LOSE)
    _, odds = stand.bet("alice", condition_id, 2_000 * TOKEN)
    assert odds == 1_494_235_163
    condition = stand.core.get_condition(condition_id)
    assert condition.payouts == [21_733_088_848_000_000_000_000, 7_636_382_043_000_000_000_000]
    assert condition.total_net_bets == [14_000 * TOKEN, 3_000 * TOKEN]


def test_winner_paid_once_loser_gets_nothing(stand):
    condition_id = stand.create()
    alice, _ = stand.bet("alice", condition_id, STAKE, OUTCOME_WIN)
    bob, _ = stand.bet("bob", condition_id, STAKE, OUTCOME_LOSE)

    with pytest.raises(ConditionNotStarted):
        stand.pool.withdraw_payout("alice", alice)
    with pytest.raises(ConditionNotStarted):
        stand.pool.view_payout(alice)

    stand.clock.advance(ONE_HOUR)
    stand.core.resolve_condition(ORACLE, 1, OUTCOME_WIN)

    view = stand.pool.view_payout(alice)
    assert view.is_win and view.amount == 190_476_190_400_000_000_000
    assert stand.pool.withdraw_payout("alice", alice) == 190_476_190_400_000_000_000
    assert stand.pool.view_payout(alice).amount == 0
    with pytest.raises(NoWinNoPrize):
        stand.pool.withdraw_payout("alice", alice)

    assert not stand.pool.view_payout(bob).is_win
    with pytest.raises(NoWinNoPrize):
        stand.pool.withdraw_payout("bob", bob)
    # receipts survive settlement
    assert stand.pool.receipts.owner_of(alice) == "alice"


def test_cancel_refunds_every_stake(stand):
    condition_id = stand.create()
    alice, _ = stand.bet("alice", condition_id, STAKE, OUTCOME_WIN)
    bob, _ = stand.bet("bob", condition_id, 2 * STAKE, OUTCOME_LOSE)
    stand.core.cancel_by_maintainer(MAINTAINER, condition_id)
    assert stand.pool.withdraw_payout("alice", alice) == STAKE
    assert stand.pool.withdraw_payout("bob", bob) == 2 * STAKE
    with pytest.raises(NoWinNoPrize):
        stand.pool.withdraw_payout("bob", bob)


def test_payout_follows_receipt_owner(stand):
    condition_id = stand.create()
    receipt_id, _ = stand.bet("alice", condition_id, STAKE)
    receipts = stand.pool.receipts
    with pytest.raises(OnlyBetOwner):
        receipts.transfer_from("mallory", "alice", "mallory", receipt_id)
    receipts.approve("alice", "carol", receipt_id)
    receipts.transfer_from("carol", "alice", "bob", receipt_id)
    assert receipts.owner_of(receipt_id) == "bob"
    assert receipts.tokens_of_owner("bob") == [receipt_id]
    assert receipts.balance_of("alice") == 0

    stand.clock.advance(ONE_HOUR)
    stand.core.resolve_condition(ORACLE, 1, OUTCOME_WIN)
    with pytest.raises(OnlyBetOwner):
        stand.pool.withdraw_payout("alice", receipt_id)
    assert stand.pool.withdraw_payout("bob", receipt_id) > STAKE
    assert stand.events.of_type("BetterWin")[0].payload["owner"] == "bob"


def test_operator_approval_and_burn(stand):
    condition_id = stand.create()
    receipt_id, _ = stand.bet("alice", condition_id, STAKE)
    receipts = stand.pool.receipts
    receipts.set_approval_for_all("alice", "desk", True)
    assert receipts.is_approved_or_owner("desk", receipt_id)
    with pytest.raises(OnlyPool):
        receipts.burn("alice", receipt_id)
    with pytest.raises(BetNotExists):
        receipts.owner_of(receipt_id + 1)
