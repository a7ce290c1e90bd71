from __future__ import annotations

import random

import pytest

from gacha_arena.game.combat.battle import BattleResolver, intensity_for, outcome_from_rolls


def test_tie_goes_to_defender() -> None:
    outcome = outcome_from_rolls(500.0, 500.0)
    assert outcome.victory is False
    assert outcome.margin == 0.0
    assert outcome.intensity == "close"


def test_outcome_margin_is_absolute_difference() -> None:
    outcome = outcome_from_rolls(400.0, 620.0)
    assert outcome.victory is False
    assert outcome.margin == 220.0
    assert outcome.intensity == "dominant"


@pytest.mark.parametrize(
    ("margin", "expected"),
    [(0, "close"), (49.9, "close"), (50, "solid"), (149.9, "solid"), (150, "dominant")],
)
def test_intensity_buckets(margin: float, expected: str) -> None:
    assert intensity_for(margin) == expected


def test_rolls_stay_within_multiplier_band() -> None:
    resolver = BattleResolver(random.Random(11))
    for _ in range(1_000):
        outcome = resolver.resolve(1_000, 2_000)
        assert 600 <= outcome.requester_roll <= 1_400
        assert 1_200 <= outcome.opponent_roll <= 2_800


def test_equal_cp_wins_about_half_the_time() -> None:
    resolver = BattleResolver(random.Random(99))
    wins = sum(resolver.resolve(1_000, 1_000).victory for _ in range(10_000))
    assert 4_700 < wins < 5_300


def test_seeded_resolver_is_reproducible() -> None:
    first = [BattleResolver(random.Random(5)).resolve(800, 900) for _ in range(3)]
    second = [BattleResolver(random.Random(5)).resolve(800, 900) for _ in range(3)]
    assert first == second


def test_overwhelming_power_always_wins() -> None:
    resolver = BattleResolver(random.Random(1))
    assert all(resolver.resolve(10_000, 1_000).victory for _ in range(500))
