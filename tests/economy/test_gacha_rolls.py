from __future__ import annotations

import random
from collections import Counter

from gacha_arena.economy.inventory.gacha import (
    GACHA_RATES,
    PITY_RANK,
    PITY_THRESHOLD,
    roll_combat_power,
    roll_rank,
)


class _FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def test_gacha_rates_sum_to_one_hundred() -> None:
    assert sum(rate for _, rate in GACHA_RATES) == 100.0


def test_roll_rank_maps_roll_to_cumulative_bands() -> None:
    assert roll_rank(_FixedRandom(0.0), pity_counter=0).rank == "Normal"
    assert roll_rank(_FixedRandom(0.699), pity_counter=0).rank == "Normal"
    assert roll_rank(_FixedRandom(0.75), pity_counter=0).rank == "Rare"
    assert roll_rank(_FixedRandom(0.95), pity_counter=0).rank == "Epic"
    assert roll_rank(_FixedRandom(0.98), pity_counter=0).rank == "Legendary"
    assert roll_rank(_FixedRandom(0.999), pity_counter=0).rank == "Mythic"


def test_roll_rank_increments_pity_counter_on_non_mythic() -> None:
    rolled = roll_rank(_FixedRandom(0.1), pity_counter=41)
    assert rolled.pity_triggered is False
    assert rolled.pity_counter_after == 42


def test_natural_mythic_resets_pity_counter() -> None:
    rolled = roll_rank(_FixedRandom(0.9999), pity_counter=57)
    assert rolled.rank == PITY_RANK
    assert rolled.pity_triggered is False
    assert rolled.pity_counter_after == 0


def test_pity_guarantees_mythic_at_threshold() -> None:
    rolled = roll_rank(_FixedRandom(0.0), pity_counter=PITY_THRESHOLD - 1)
    assert rolled.rank == PITY_RANK
    assert rolled.pity_triggered is True
    assert rolled.pity_counter_after == 0


def test_hundred_consecutive_draws_contain_a_mythic() -> None:
    rng = _FixedRandom(0.0)
    counter = 0
    ranks: list[str] = []
    for _ in range(PITY_THRESHOLD):
        rolled = roll_rank(rng, pity_counter=counter)
        counter = rolled.pity_counter_after
        ranks.append(rolled.rank)

    assert ranks.count(PITY_RANK) == 1
    assert ranks[-1] == PITY_RANK


def test_roll_distribution_roughly_follows_rates() -> None:
    rng = random.Random(1234)
    counts = Counter(roll_rank(rng, pity_counter=0).rank for _ in range(20_000))

    assert 0.67 < counts["Normal"] / 20_000 < 0.73
    assert 0.18 < counts["Rare"] / 20_000 < 0.22
    assert counts["Mythic"] < counts["Legendary"] < counts["Epic"]


def test_roll_combat_power_stays_within_spread() -> None:
    rng = random.Random(7)
    values = [roll_combat_power(rng, 1000) for _ in range(500)]
    assert min(values) >= 700
    assert max(values) <= 1300
