from __future__ import annotations

import math
import random
from collections.abc import Mapping, Sequence

import structlog

from gacha_arena.game.combat.content import (
    DEFAULT_OPPONENT,
    DEFAULT_OPPONENT_CP_RANGE,
    OPPONENT_POOLS,
    SPECIAL_ENCOUNTER_CHANCE,
    SPECIAL_ENCOUNTERS,
    OpponentTemplate,
)
from gacha_arena.game.combat.tiers import Tier, TierCatalog, get_tier_catalog
from gacha_arena.game.combat.types import Encounter

logger = structlog.get_logger(__name__)

AUTO_MATCH_VARIATION = 0.7
AUTO_MATCH_WEAKER_SHARE = 0.3

DIFFICULTY_BANDS: tuple[tuple[float, str], ...] = (
    (0.6, "Very Easy"),
    (0.8, "Easy"),
    (1.2, "Balanced"),
    (1.5, "Hard"),
    (2.0, "Very Hard"),
)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def auto_match_window(tier: Tier, effective_cp: int) -> tuple[int, int]:
    variation = effective_cp * AUTO_MATCH_VARIATION
    low = max(tier.min_cp, math.floor(effective_cp - variation * AUTO_MATCH_WEAKER_SHARE))
    high = min(tier.max_cp, math.floor(effective_cp + variation))
    return _clamp(low, tier.min_cp, tier.max_cp), _clamp(high, tier.min_cp, tier.max_cp)


def difficulty_label(requester_cp: int, opponent_cp: int) -> str:
    if requester_cp <= 0:
        return "Extreme"
    ratio = opponent_cp / requester_cp
    for upper_bound, label in DIFFICULTY_BANDS:
        if ratio <= upper_bound:
            return label
    return "Extreme"


class EncounterGenerator:
    def __init__(
        self,
        *,
        catalog: TierCatalog | None = None,
        pools: Mapping[str, Sequence[OpponentTemplate]] = OPPONENT_POOLS,
        rng: random.Random | None = None,
    ) -> None:
        self.catalog = catalog or get_tier_catalog()
        self.pools = pools
        self.rng = rng or random.Random()

    def generate(self, effective_cp: int, explicit_tier: str | None = None) -> Encounter:
        tier = self.catalog.get(explicit_tier) if explicit_tier else self.catalog.tier_for(effective_cp)
        pool = self.pools.get(tier.label) or ()
        if not pool:
            logger.warning("encounter_pool_empty", tier=tier.label)
            tier = self.catalog.lowest
            pool = self.pools.get(tier.label) or ()
        if not pool:
            logger.error("encounter_pool_fallback_default", tier=tier.label)
            return Encounter(
                name=DEFAULT_OPPONENT.name,
                type_tag=DEFAULT_OPPONENT.type_tag,
                combat_power=self.rng.randint(*DEFAULT_OPPONENT_CP_RANGE),
                tier_label=tier.label,
                description=DEFAULT_OPPONENT.description,
            )

        template = self.rng.choice(pool)
        if explicit_tier:
            combat_power = self.rng.randint(tier.min_cp, tier.max_cp)
        else:
            low, high = auto_match_window(tier, effective_cp)
            combat_power = self.rng.randint(low, high)
        return Encounter(
            name=template.name,
            type_tag=template.type_tag,
            combat_power=combat_power,
            tier_label=tier.label,
            description=template.description,
        )

    def maybe_special(self) -> Encounter | None:
        if self.rng.random() >= SPECIAL_ENCOUNTER_CHANCE:
            return None
        special = self.rng.choice(SPECIAL_ENCOUNTERS)
        return Encounter(
            name=special.name,
            type_tag="special",
            combat_power=special.combat_power,
            tier_label=self.catalog.tier_for(special.combat_power).label,
            description=special.description,
            coin_multiplier=special.coin_multiplier,
            is_special=True,
        )
