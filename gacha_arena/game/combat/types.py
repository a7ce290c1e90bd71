from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Encounter:
    name: str
    type_tag: str
    combat_power: int
    tier_label: str
    description: str
    coin_multiplier: float = 1.0
    is_special: bool = False


@dataclass(frozen=True, slots=True)
class BattleOutcome:
    victory: bool
    requester_roll: float
    opponent_roll: float
    margin: float
    intensity: str


@dataclass(slots=True)
class BattleReport:
    account_id: int
    requester_cp: int
    encounter: Encounter
    outcome: BattleOutcome
    difficulty: str
    coins_awarded: int
    wallet_after: int


@dataclass(slots=True)
class ArenaFightReport:
    challenger_id: int
    defender_id: int
    challenger_cp: int
    defender_cp: int
    outcome: BattleOutcome
    winner_id: int
    loser_id: int
    winner_coins: int
    loser_coins: int
    challenger_position: int | None
    defender_position: int | None
