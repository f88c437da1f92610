"""Bet - one accepted stake, identified by its receipt id."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Bet(BaseModel):
    """Stake record. ``payed`` flips once on settlement; the receipt itself is never burned."""

    receipt_id: int = Field(..., ge=1)
    condition_id: int = Field(..., ge=1)
    amount: int = Field(..., gt=0)
    outcome: int
    odds: int = Field(..., gt=0)  # locked at acceptance, ODDS_SCALE
    created_at: int
    payed: bool = False


class PayoutView(BaseModel):
    """Read-only payout preview for a receipt."""

    receipt_id: int
    is_win: bool
    amount: int = Field(..., ge=0)
