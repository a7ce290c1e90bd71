from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Coins:
    amount: int


@dataclass(frozen=True, slots=True)
class DrawCredits:
    amount: int


@dataclass(frozen=True, slots=True)
class PowerGrant:
    definition_id: int
    combat_power: int | None = None


Reward = Coins | DrawCredits | PowerGrant


class RewardFormatError(ValueError):
    pass


def _positive_int(raw: Mapping[str, object], field: str) -> int:
    value = raw.get(field)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise RewardFormatError(f"reward field {field!r} must be a positive integer")
    return value


def parse_reward(raw: Mapping[str, object]) -> Reward:
    kind = raw.get("type")
    if kind == "coins":
        return Coins(amount=_positive_int(raw, "amount"))
    if kind in ("gacha_draws", "draw_chances"):
        return DrawCredits(amount=_positive_int(raw, "amount"))
    if kind == "power":
        combat_power = raw.get("cp")
        if combat_power is not None and (
            isinstance(combat_power, bool) or not isinstance(combat_power, int) or combat_power < 0
        ):
            raise RewardFormatError("reward field 'cp' must be a non-negative integer")
        return PowerGrant(
            definition_id=_positive_int(raw, "power_id"),
            combat_power=combat_power,
        )
    raise RewardFormatError(f"unknown reward type: {kind!r}")


def parse_rewards(raw_items: Iterable[Mapping[str, object]]) -> list[Reward]:
    return [parse_reward(item) for item in raw_items]


def serialize_reward(reward: Reward) -> dict[str, object]:
    match reward:
        case Coins(amount=amount):
            return {"type": "coins", "amount": amount}
        case DrawCredits(amount=amount):
            return {"type": "gacha_draws", "amount": amount}
        case PowerGrant(definition_id=definition_id, combat_power=combat_power):
            payload: dict[str, object] = {"type": "power", "power_id": definition_id}
            if combat_power is not None:
                payload["cp"] = combat_power
            return payload


def describe_reward(reward: Reward) -> str:
    match reward:
        case Coins(amount=amount):
            return f"{amount:,} coins"
        case DrawCredits(amount=amount):
            return f"{amount} draw credit" + ("" if amount == 1 else "s")
        case PowerGrant(definition_id=definition_id):
            return f"power #{definition_id}"
