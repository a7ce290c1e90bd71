from __future__ import annotations

import random

from gacha_arena.game.combat.types import BattleOutcome

ROLL_MIN_MULTIPLIER = 0.6
ROLL_MAX_MULTIPLIER = 1.4
CLOSE_MARGIN = 50
SOLID_MARGIN = 150


def intensity_for(margin: float) -> str:
    if margin < CLOSE_MARGIN:
        return "close"
    if margin < SOLID_MARGIN:
        return "solid"
    return "dominant"


class BattleResolver:
    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def _roll(self, combat_power: int) -> float:
        return combat_power * self.rng.uniform(ROLL_MIN_MULTIPLIER, ROLL_MAX_MULTIPLIER)

    def resolve(self, requester_cp: int, opponent_cp: int) -> BattleOutcome:
        requester_roll = self._roll(requester_cp)
        opponent_roll = self._roll(opponent_cp)
        return outcome_from_rolls(requester_roll, opponent_roll)


def outcome_from_rolls(requester_roll: float, opponent_roll: float) -> BattleOutcome:
    # Equal rolls go to the defender.
    margin = abs(requester_roll - opponent_roll)
    return BattleOutcome(
        victory=requester_roll > opponent_roll,
        requester_roll=requester_roll,
        opponent_roll=opponent_roll,
        margin=margin,
        intensity=intensity_for(margin),
    )
