"""OutcomeDependency - reinforcement/margin pair captured by new conditions."""

from __future__ import annotations

from pydantic import BaseModel, Field


class OutcomeDependency(BaseModel):
    key: int
    reinforcement: int = Field(..., ge=0)
    margin: int = Field(..., ge=0)  # ODDS_SCALE
