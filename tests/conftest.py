"""Shared fixtures: a funded pool with one core on a manual clock."""

from dataclasses import dataclass

import pytest

from predpool.config.settings import Settings
from predpool.core.access import RoleSet
from predpool.core.clock import ManualClock
from predpool.core.engine import Core
from predpool.core.events import MemorySink
from predpool.pool.router import LiquidityPool
from predpool.pool.stand import prepare_stand

TOKEN = 10**18
ONE_HOUR = 3600
ORACLE = "oracle"
MAINTAINER = "maintainer"
OUTCOME_WIN = 1
OUTCOME_LOSE = 2


@dataclass
class Stand:
    core: Core
    pool: LiquidityPool
    clock: ManualClock
    events: MemorySink
    oracles: RoleSet
    maintainers: RoleSet
    settings: Settings

    @property
    def start(self) -> int:
        return self.clock.now() + ONE_HOUR

    def create(self, oracle_condition_id: int = 1, odds=(1, 1), outcomes=(OUTCOME_WIN, OUTCOME_LOSE), start=None) -> int:
        return self.core.create_condition(
            ORACLE,
            oracle_condition_id,
            0,
            odds,
            outcomes,
            start if start is not None else self.start,
            "ipfs",
        )

    def bet(self, bettor: str, condition_id: int, amount: int, outcome: int = OUTCOME_WIN, min_odds: int = 0):
        deadline = self.clock.now() + 10
        return self.pool.bet(bettor, condition_id, amount, outcome, deadline, min_odds)


@pytest.fixture
def stand():
    settings = Settings.from_dict({})
    clock = ManualClock()
    events = MemorySink()
    oracles = RoleSet("oracle", [ORACLE])
    maintainers = RoleSet("maintainer", [MAINTAINER])
    core, pool = prepare_stand(
        settings,
        oracles=oracles,
        maintainers=maintainers,
        liquidity=1_000_000 * TOKEN,
        clock=clock,
        events=events,
    )
    return Stand(core, pool, clock, events, oracles, maintainers, settings)
