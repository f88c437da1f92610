"""Outcome-dependency registry: outcome/scope id -> (reinforcement, margin), with a global default."""

from __future__ import annotations

from typing import Sequence

import structlog

from predpool.core.errors import WrongDataFormat
from predpool.models import OutcomeDependency
from predpool.pricing.fixed_point import UINT128_MAX, checked

log = structlog.get_logger(__name__)


def _pairs(flat: Sequence[int]) -> list[tuple[int, int]]:
    """Split [key, value, key, value, ...] into pairs. Odd length is WrongDataFormat."""
    if len(flat) % 2 != 0:
        raise WrongDataFormat("expected [key, value, ...] pairs", length=len(flat))
    pairs = []
    for i in range(0, len(flat), 2):
        key, value = int(flat[i]), int(flat[i + 1])
        checked(key, UINT128_MAX)
        checked(value, UINT128_MAX)
        pairs.append((key, value))
    return pairs


class OutcomeDependencyRegistry:
    """Maintainer-configured reinforcement and margin per key. Reads never fail."""

    def __init__(self, default_reinforcement: int, default_margin: int) -> None:
        self.default_reinforcement = default_reinforcement
        self.default_margin = default_margin
        self._reinforcements: dict[int, int] = {}
        self._margins: dict[int, int] = {}

    def get_reinforcement(self, key: int) -> int:
        return self._reinforcements.get(key, self.default_reinforcement)

    def get_margin(self, key: int) -> int:
        return self._margins.get(key, self.default_margin)

    def get(self, key: int) -> OutcomeDependency:
        return OutcomeDependency(
            key=key,
            reinforcement=self.get_reinforcement(key),
            margin=self.get_margin(key),
        )

    def update_reinforcements(self, flat: Sequence[int]) -> int:
        """Apply a batch of reinforcement overrides. Returns number of entries written."""
        pairs = _pairs(flat)
        self._reinforcements.update(pairs)
        log.info("reinforcements_updated", entries=len(pairs))
        return len(pairs)

    def update_margins(self, flat: Sequence[int]) -> int:
        """Apply a batch of margin overrides. Returns number of entries written."""
        pairs = _pairs(flat)
        self._margins.update(pairs)
        log.info("margins_updated", entries=len(pairs))
        return len(pairs)

    def entries(self) -> list[OutcomeDependency]:
        keys = sorted(set(self._reinforcements) | set(self._margins))
        return [self.get(k) for k in keys]
