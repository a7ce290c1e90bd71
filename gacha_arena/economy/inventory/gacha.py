from __future__ import annotations

import random
from dataclasses import dataclass

GACHA_RATES: tuple[tuple[str, float], ...] = (
    ("Normal", 70.0),
    ("Rare", 20.0),
    ("Epic", 7.0),
    ("Legendary", 2.5),
    ("Mythic", 0.5),
)
PITY_RANK = "Mythic"
PITY_THRESHOLD = 100
CP_SPREAD_LOW = 0.7
CP_SPREAD_HIGH = 1.3


@dataclass(frozen=True, slots=True)
class RankRoll:
    rank: str
    pity_triggered: bool
    pity_counter_after: int


def roll_rank(rng: random.Random, *, pity_counter: int) -> RankRoll:
    next_counter = pity_counter + 1
    if next_counter >= PITY_THRESHOLD:
        return RankRoll(rank=PITY_RANK, pity_triggered=True, pity_counter_after=0)

    roll = rng.random() * 100
    cumulative = 0.0
    rank = GACHA_RATES[-1][0]
    for candidate, rate in GACHA_RATES:
        cumulative += rate
        if roll < cumulative:
            rank = candidate
            break
    return RankRoll(
        rank=rank,
        pity_triggered=False,
        pity_counter_after=0 if rank == PITY_RANK else next_counter,
    )


def roll_combat_power(rng: random.Random, base_cp: int) -> int:
    low = int(base_cp * CP_SPREAD_LOW)
    high = int(base_cp * CP_SPREAD_HIGH)
    return rng.randint(low, max(low, high))
