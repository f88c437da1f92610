"""Wire a core and its pool from Settings."""

from __future__ import annotations

from predpool.config.settings import Settings
from predpool.core.access import Role
from predpool.core.clock import Clock
from predpool.core.engine import Core
from predpool.core.events import EventSink
from predpool.pool.router import LiquidityPool
from predpool.registry.dependencies import OutcomeDependencyRegistry
from predpool.rewards.distribution import RewardDistributor


def build_core(
    settings: Settings,
    core_id: str,
    *,
    oracles: Role,
    maintainers: Role,
    clock: Clock | None = None,
    events: EventSink | None = None,
) -> Core:
    """New core with its own registry seeded from the configured defaults."""
    registry = OutcomeDependencyRegistry(settings.default_reinforcement, settings.default_margin)
    return Core(
        core_id,
        oracles=oracles,
        maintainers=maintainers,
        registry=registry,
        clock=clock,
        events=events,
        max_banks_ratio=settings.max_banks_ratio,
        odds_scale=settings.odds_scale,
    )


def prepare_stand(
    settings: Settings,
    *,
    oracles: Role,
    maintainers: Role,
    liquidity: int,
    clock: Clock | None = None,
    events: EventSink | None = None,
    core_id: str = "core-1",
) -> tuple[Core, LiquidityPool]:
    """A core attached to a freshly funded pool."""
    core = build_core(settings, core_id, oracles=oracles, maintainers=maintainers, clock=clock, events=events)
    pool = LiquidityPool(
        core,
        maintainers=maintainers,
        liquidity=liquidity,
        rewards=RewardDistributor(settings.oracle_fee, settings.dao_fee),
        clock=clock,
        events=events,
    )
    return core, pool
