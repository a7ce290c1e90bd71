from __future__ import annotations

import math
import random

PVE_BASE_COINS = 50
PVE_JITTER_MIN = 0.8
PVE_JITTER_MAX = 1.2
PVP_WINNER_BASE_COINS = 300
PVP_LOSER_BASE_COINS = 10

# Checked from the highest threshold down.
HIGH_POWER_STEPS: tuple[tuple[int, float], ...] = (
    (20_000, 2.5),
    (10_000, 2.0),
    (5_000, 1.5),
)


def power_scaling(opponent_cp: int) -> float:
    return max(1.0, opponent_cp / 100)


def high_power_step(opponent_cp: int) -> float:
    for threshold, step in HIGH_POWER_STEPS:
        if opponent_cp > threshold:
            return step
    return 1.0


def pve_reward(
    opponent_cp: int,
    tier_multiplier: float,
    *,
    rng: random.Random,
    coin_multiplier: float = 1.0,
) -> int:
    jitter = rng.uniform(PVE_JITTER_MIN, PVE_JITTER_MAX)
    base = math.floor(PVE_BASE_COINS * power_scaling(opponent_cp) * tier_multiplier * jitter)
    coins = math.floor(base * high_power_step(opponent_cp))
    if coin_multiplier != 1.0:
        coins = math.floor(coins * coin_multiplier)
    return coins


def pvp_rewards(*, winner_opponent_cp: int, loser_opponent_cp: int) -> tuple[int, int]:
    """Return (winner coins, loser coins); each side scales by the other side's CP."""
    winner_coins = math.floor(PVP_WINNER_BASE_COINS * power_scaling(winner_opponent_cp))
    loser_coins = math.floor(PVP_LOSER_BASE_COINS * power_scaling(loser_opponent_cp))
    return winner_coins, loser_coins
