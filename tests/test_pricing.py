"""Fixed-point odds: margin transform, reserve pricing, range checks."""

import pytest

from predpool.core.errors import ArithmeticOverflow, DivisionByZero, ZeroOdds
from predpool.pricing.fixed_point import UINT128_MAX, ceil_step, div, isqrt, mul_div, sub, to_u128
from predpool.pricing.odds import margin_adjusted_odds, odds_from_banks, payout_for, raw_odds_from_banks

MARGIN = 50_000_000  # 5%


@pytest.mark.parametrize(
    "odds, margin, expected",
    [
        (1_730_000_000, 50_000_000, 1_658_829_423),
        (1_980_000_000, 50_000_000, 1_886_657_619),
        (1_980_000_000, 100_000_000, 1_801_801_818),
        (2_000_000_000, 50_000_000, 1_904_761_904),
    ],
)
def test_margin_adjusted_odds(odds, margin, expected):
    assert margin_adjusted_odds(odds, margin) == expected


def test_odds_from_banks_known_values():
    assert odds_from_banks(1_500_000_000, 3_000_000_000, 100_000, 0, MARGIN) == 2_787_053_105
    assert odds_from_banks(50_000_000, 50_000_000, 100_000, 0, MARGIN) == 1_904_761_904
    assert odds_from_banks(50_000_000, 50_000_000, 25_000_000, 0, MARGIN) == 1_610_952_313
    assert odds_from_banks(50_000_000, 50_000_000, 50_000_000, 0, MARGIN) == 1_453_749_596


def test_small_stakes_fill_at_spot():
    # stakes within the first 1% step all see the spot price
    spot = odds_from_banks(50_000_000, 50_000_000, 1, 0, MARGIN)
    for amount in (1_000, 100_000, 500_000):
        assert odds_from_banks(50_000_000, 50_000_000, amount, 0, MARGIN) == spot


def test_larger_stake_gets_worse_odds():
    quotes = [odds_from_banks(50_000_000, 50_000_000, a, 0, MARGIN) for a in (10_000_000, 25_000_000, 50_000_000)]
    assert quotes == sorted(quotes, reverse=True)
    assert len(set(quotes)) == 3


def test_outcome_index_mirrors_banks():
    a = odds_from_banks(60_000_000, 40_000_000, 1_000_000, 0, MARGIN)
    b = odds_from_banks(40_000_000, 60_000_000, 1_000_000, 1, MARGIN)
    assert a == b


def test_raw_odds_rejects_bad_index():
    with pytest.raises(ValueError):
        raw_odds_from_banks(1, 1, 1, 2)


def test_banks_below_one_step_are_rejected():
    with pytest.raises(ZeroOdds):
        odds_from_banks(150, 99, 1, 0, MARGIN)
    with pytest.raises(ZeroOdds):
        raw_odds_from_banks(0, 0, 100, 1)


def test_zero_margin_is_identity_on_spot():
    assert odds_from_banks(50_000_000, 50_000_000, 100_000, 0, 0) == raw_odds_from_banks(50_000_000, 50_000_000, 100_000, 0)


def test_payout_floors():
    assert payout_for(100 * 10**18, 1_904_761_904) == 190_476_190_400_000_000_000
    assert payout_for(3, 1_500_000_000) == 4


def test_fixed_point_range_checks():
    with pytest.raises(ArithmeticOverflow):
        sub(1, 2)
    with pytest.raises(ArithmeticOverflow):
        to_u128(UINT128_MAX + 1)
    with pytest.raises(DivisionByZero):
        div(1, 0)
    assert mul_div(7, 3, 2) == 10
    assert isqrt(99) == 9


def test_ceil_step():
    assert ceil_step(10, 100, 100) == 100
    assert ceil_step(101, 100, 100) == 200
    assert ceil_step(200, 100, 100) == 200
