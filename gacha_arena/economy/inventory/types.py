from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class DrawnPower:
    power_instance_id: int
    power_definition_id: int
    name: str
    rank: str
    combat_power: int
    pity_triggered: bool


@dataclass(slots=True)
class DrawResult:
    account_id: int
    draws: list[DrawnPower] = field(default_factory=list)
    draw_credits_after: int = 0
    pity_counter_after: int = 0


@dataclass(slots=True)
class EquipResult:
    account_id: int
    power_instance_id: int | None
    combat_power: int
    effective_cp: int
    rank: str | None
