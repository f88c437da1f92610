"""Outcome-dependency registry and its effect on new conditions."""

import pytest

from conftest import MAINTAINER, ORACLE, OUTCOME_WIN, TOKEN
from predpool.core.errors import ArithmeticOverflow, OnlyMaintainer, WrongDataFormat
from predpool.pricing.fixed_point import UINT128_MAX
from predpool.registry.dependencies import OutcomeDependencyRegistry


def test_defaults_when_no_entry():
    reg = OutcomeDependencyRegistry(20_000 * TOKEN, 50_000_000)
    dep = reg.get(42)
    assert dep.reinforcement == 20_000 * TOKEN
    assert dep.margin == 50_000_000
    assert reg.entries() == []


def test_batch_updates():
    reg = OutcomeDependencyRegistry(100, 5)
    assert reg.update_reinforcements([1, 10, 2, 20]) == 2
    assert reg.update_margins([2, 7]) == 1
    assert reg.get_reinforcement(1) == 10
    assert reg.get_reinforcement(3) == 100
    assert reg.get(2).margin == 7
    assert [e.key for e in reg.entries()] == [1, 2]


def test_odd_length_is_rejected_without_effect():
    reg = OutcomeDependencyRegistry(100, 5)
    with pytest.raises(WrongDataFormat):
        reg.update_reinforcements([1, 10, 2])
    with pytest.raises(WrongDataFormat):
        reg.update_margins([1])
    assert reg.get_reinforcement(1) == 100
    assert reg.get_margin(1) == 5


def test_values_are_range_checked():
    reg = OutcomeDependencyRegistry(100, 5)
    with pytest.raises(ArithmeticOverflow):
        reg.update_reinforcements([1, UINT128_MAX + 1])


def test_only_maintainer_updates(stand):
    with pytest.raises(OnlyMaintainer):
        stand.core.update_reinforcements(ORACLE, [1, 1])
    with pytest.raises(OnlyMaintainer):
        stand.core.update_margins("someone", [1, 1])


def test_new_conditions_pick_up_updates(stand):
    r = 2_000 * TOKEN
    stand.core.update_reinforcements(MAINTAINER, [OUTCOME_WIN, r])
    stand.core.update_margins(MAINTAINER, [OUTCOME_WIN, 5_000_000])
    condition_id = stand.create()
    assert stand.core.get_condition_reinforcement(condition_id) == r
    assert stand.core.get_condition_funds(condition_id) == (r // 2, r // 2)
    assert stand.core.get_condition(condition_id).margin == 5_000_000
    assert stand.core.calculate_odds(condition_id, 100 * TOKEN, OUTCOME_WIN) == 1_917_372_219


def test_existing_conditions_keep_their_snapshot(stand):
    condition_id = stand.create()
    stand.core.update_reinforcements(MAINTAINER, [OUTCOME_WIN, 1 * TOKEN])
    stand.core.update_margins(MAINTAINER, [OUTCOME_WIN, 0])
    condition = stand.core.get_condition(condition_id)
    assert condition.reinforcement == 20_000 * TOKEN
    assert condition.margin == 50_000_000
    assert stand.events.of_type("ReinforcementsUpdated")[0].payload == {"entries": 1}
