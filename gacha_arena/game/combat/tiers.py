from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache

from gacha_arena.game.combat.errors import ConfigurationError, UnknownTierError


@dataclass(frozen=True, slots=True)
class Tier:
    label: str
    min_cp: int
    max_cp: int
    reward_multiplier: float

    def contains(self, cp: int) -> bool:
        return self.min_cp <= cp <= self.max_cp


DEFAULT_TIERS: tuple[Tier, ...] = (
    Tier("Normal", 50, 150, 1.0),
    Tier("Rare", 200, 400, 1.5),
    Tier("Epic", 800, 1_200, 2.0),
    Tier("Legendary", 2_000, 3_000, 2.5),
    Tier("Mythic", 5_000, 6_000, 3.0),
    Tier("Divine", 9_000, 12_000, 4.0),
    Tier("Cosmic", 18_000, 25_000, 5.0),
    Tier("Transcendent", 35_000, 50_000, 6.0),
    Tier("Omnipotent", 75_000, 100_000, 7.0),
    Tier("Absolute", 500_000, 1_000_000, 8.0),
)


def _validate(tiers: Sequence[Tier]) -> None:
    if not tiers:
        raise ConfigurationError("tier catalog must not be empty")
    seen: set[str] = set()
    previous: Tier | None = None
    for tier in tiers:
        if tier.label in seen:
            raise ConfigurationError(f"duplicate tier label: {tier.label}")
        seen.add(tier.label)
        if tier.min_cp > tier.max_cp:
            raise ConfigurationError(f"tier {tier.label} has min_cp > max_cp")
        if tier.reward_multiplier <= 0:
            raise ConfigurationError(f"tier {tier.label} must have a positive reward multiplier")
        if previous is not None and tier.min_cp <= previous.max_cp:
            raise ConfigurationError(
                f"tier {tier.label} overlaps or precedes tier {previous.label}"
            )
        previous = tier


class TierCatalog:
    def __init__(self, tiers: Sequence[Tier] = DEFAULT_TIERS) -> None:
        _validate(tiers)
        self._tiers: tuple[Tier, ...] = tuple(tiers)
        self._by_label: dict[str, Tier] = {tier.label: tier for tier in self._tiers}

    @property
    def tiers(self) -> tuple[Tier, ...]:
        return self._tiers

    @property
    def lowest(self) -> Tier:
        return self._tiers[0]

    @property
    def highest(self) -> Tier:
        return self._tiers[-1]

    def get(self, label: str) -> Tier:
        tier = self._by_label.get(label)
        if tier is None:
            raise UnknownTierError(label)
        return tier

    def range_of(self, label: str) -> tuple[int, int]:
        tier = self.get(label)
        return tier.min_cp, tier.max_cp

    def tier_for(self, cp: int) -> Tier:
        # Gaps and values below the first tier resolve upwards.
        for tier in self._tiers:
            if cp <= tier.max_cp:
                return tier
        return self._tiers[-1]


@lru_cache(maxsize=1)
def get_tier_catalog() -> TierCatalog:
    return TierCatalog(DEFAULT_TIERS)
