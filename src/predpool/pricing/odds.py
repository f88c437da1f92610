"""Odds pricing: reserve-implied odds with a stepped price-impact model and a bookmaker margin overlay.

Odds and margins are integers at ``scale`` (1.0 == scale, normally ODDS_SCALE = 1e9).
The two reserves are treated as an implied-probability market: the probability of
the chosen side is its reserve share, and a stake moves that share toward
``(bank + amount) / (total + amount)``. The stake is measured in 1% steps of the
chosen bank; a stake below one step prices at the current share (no impact),
larger stakes are priced at the step-weighted average of the current and
post-stake shares. The fair odds are then pulled down by the margin so that the
inverse odds of both sides sum to ``1 + margin``.
"""

from __future__ import annotations

from predpool.core.errors import ZeroOdds
from predpool.pricing.fixed_point import (
    ODDS_SCALE,
    add,
    ceil_step,
    div,
    isqrt,
    mul,
    mul_div,
    sub,
)

# stakes are measured in 1% steps of the chosen bank
MIN_BANK = 100


def margin_adjusted_odds(odds: int, margin: int, scale: int = ODDS_SCALE) -> int:
    """Apply the bookmaker margin to fair decimal odds. Odds must be strictly above 1.0."""
    d = scale
    # fair odds of the opposite side: 1 / (1 - 1/odds)
    revert_odds = div(d * d, sub(d, div(d * d, odds)))
    margin_eur = add(d, margin)
    a = mul_div(margin_eur, sub(revert_odds, d), sub(odds, d))
    b = div(
        add(mul(mul_div(sub(revert_odds, d), d, sub(odds, d)), margin), mul(d, margin)),
        d,
    )
    c = sub(2 * d, margin_eur)
    root = isqrt(add(mul(b, b), mul(4, mul(a, c))))
    return add(mul_div(sub(root, b), d, mul(2, a)), d)


def raw_odds_from_banks(bank0: int, bank1: int, amount: int, outcome_index: int, scale: int = ODDS_SCALE) -> int:
    """Fair odds (no margin) for staking ``amount`` on ``outcome_index``."""
    if outcome_index not in (0, 1):
        raise ValueError(f"outcome_index must be 0 or 1, got {outcome_index}")
    if bank0 < MIN_BANK or bank1 < MIN_BANK:
        raise ZeroOdds("bank below minimum", bank0=bank0, bank1=bank1)
    if outcome_index == 1:
        bank0, bank1 = bank1, bank0
    d = scale
    total = add(bank0, bank1)
    pe1 = mul_div(add(bank0, amount), d, add(total, amount))
    ps1 = mul_div(bank0, d, total)
    steps = div(ceil_step(mul_div(amount, d, div(bank0, 100)), d, d), d)
    if steps == 1:
        return div(d * d, ps1)
    weighted = div(mul(sub(add(mul(pe1, steps), mul(2, ps1)), mul(2, pe1)), d), steps)
    return div(d**3, weighted)


def odds_from_banks(
    bank0: int,
    bank1: int,
    amount: int,
    outcome_index: int,
    margin: int,
    scale: int = ODDS_SCALE,
) -> int:
    """Quoted odds a stake of ``amount`` on ``outcome_index`` is filled at."""
    raw = raw_odds_from_banks(bank0, bank1, amount, outcome_index, scale)
    return margin_adjusted_odds(raw, margin, scale)


def payout_for(amount: int, odds: int, scale: int = ODDS_SCALE) -> int:
    """floor(amount * odds / scale)."""
    return mul_div(amount, odds, scale)
