from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OpponentTemplate:
    name: str
    type_tag: str
    description: str


@dataclass(frozen=True, slots=True)
class SpecialEncounter:
    name: str
    combat_power: int
    description: str
    coin_multiplier: float


DEFAULT_OPPONENT = OpponentTemplate(
    name="Basic Titan",
    type_tag="titan",
    description="A wandering pure titan",
)
DEFAULT_OPPONENT_CP_RANGE = (50, 99)

OPPONENT_POOLS: Mapping[str, Sequence[OpponentTemplate]] = {
    "Normal": (
        OpponentTemplate("Mindless Pure Titan", "titan", "Basic mindless titan driven by hunger"),
        OpponentTemplate("Wandering Pure Titan", "titan", "Aimlessly roaming titan"),
        OpponentTemplate("Crawler Titan", "titan", "Titan that moves on all fours"),
        OpponentTemplate("Running Titan", "titan", "Unusually fast pure titan"),
        OpponentTemplate("Garrison Soldier", "human", "Standard wall defender"),
        OpponentTemplate("Military Police Officer", "human", "Interior law enforcement"),
        OpponentTemplate("Scout Cadet", "human", "Survey Corps trainee"),
    ),
    "Rare": (
        OpponentTemplate("Abnormal Titan Alpha", "titan", "Highly intelligent abnormal titan"),
        OpponentTemplate("Deviant Titan Prime", "titan", "Unpredictable behavior titan"),
        OpponentTemplate("Berserker Titan Elite", "titan", "Frenzied combat titan"),
        OpponentTemplate("Runner Titan Swift", "titan", "Extremely fast titan"),
        OpponentTemplate("Royal Guard Elite", "human", "Fritz family protector"),
        OpponentTemplate("Garrison Commander", "human", "Wall defense leader"),
    ),
    "Epic": (
        OpponentTemplate("Attack Titan Fragment", "titan", "Piece of Attack Titan power"),
        OpponentTemplate("Colossal Titan Fragment", "titan", "Piece of Colossal Titan power"),
        OpponentTemplate("Armored Titan Fragment", "titan", "Piece of Armored Titan power"),
        OpponentTemplate("Beast Titan Fragment", "titan", "Piece of Beast Titan power"),
        OpponentTemplate("Ackerman Clan Leader", "human", "Head of Ackerman family"),
        OpponentTemplate("Marley Supreme Commander", "human", "Highest military authority"),
    ),
    "Legendary": (
        OpponentTemplate("Nine Titans Wielder", "titan", "Multiple powers"),
        OpponentTemplate("Founding Titan User", "titan", "Royal power"),
        OpponentTemplate("Rumbling Controller", "titan", "Wall titan commander"),
        OpponentTemplate("Ackerman Patriarch", "human", "Clan leader"),
        OpponentTemplate("Paths Wanderer", "human", "Reality traveler"),
    ),
    "Mythic": (
        OpponentTemplate("Ymir's Descendant", "titan", "Original bloodline"),
        OpponentTemplate("Progenitor Fragment", "titan", "Ancient essence"),
        OpponentTemplate("Founding Titan Prime", "titan", "Ultimate Founding power"),
        OpponentTemplate("Paths Sovereign", "human", "Paths dimension ruler"),
    ),
    "Divine": (
        OpponentTemplate("Ymir Fritz", "titan", "First titan"),
        OpponentTemplate("Founding God", "titan", "Ultimate creator"),
        OpponentTemplate("Paths Ruler", "human", "Dimension master"),
        OpponentTemplate("Reality Sovereign", "human", "Reality controller"),
    ),
    "Cosmic": (
        OpponentTemplate("Universal Titan", "titan", "Cosmic entity"),
        OpponentTemplate("Cosmic Founder", "titan", "Cosmic Founding power"),
        OpponentTemplate("Reality Shaper", "human", "Universe bender"),
        OpponentTemplate("Dimensional Sovereign", "human", "Dimensional ruler"),
    ),
    "Transcendent": (
        OpponentTemplate("Omnipotent Founder", "titan", "Beyond reality"),
        OpponentTemplate("Transcendent Entity", "titan", "Beyond existence"),
        OpponentTemplate("Dimensional Lord", "human", "Reality controller"),
    ),
    "Omnipotent": (
        OpponentTemplate("Absolute Being", "titan", "Perfect existence"),
        OpponentTemplate("Omnipotent God", "titan", "True omnipotence"),
        OpponentTemplate("Supreme Entity", "human", "Ultimate power"),
    ),
    "Absolute": (
        OpponentTemplate("Creator's Avatar", "titan", "Divine manifestation"),
        OpponentTemplate("The Absolute", "titan", "Ultimate existence"),
        OpponentTemplate("Primordial God", "human", "Source of all"),
    ),
}

SPECIAL_ENCOUNTER_CHANCE = 0.05
SPECIAL_ENCOUNTERS: tuple[SpecialEncounter, ...] = (
    SpecialEncounter(
        name="Rod Reiss Titan",
        combat_power=800,
        description="Massive abnormal titan crawling towards the walls",
        coin_multiplier=2.0,
    ),
    SpecialEncounter(
        name="Pure Titan Horde",
        combat_power=600,
        description="Multiple titans advancing together",
        coin_multiplier=1.8,
    ),
    SpecialEncounter(
        name="Titan Shifter",
        combat_power=1000,
        description="Intelligent titan with human consciousness",
        coin_multiplier=2.2,
    ),
)
