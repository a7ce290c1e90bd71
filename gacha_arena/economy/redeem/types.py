from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from gacha_arena.economy.rewards.types import Reward


@dataclass(slots=True)
class RedeemResult:
    code: str
    description: str
    rewards: list[Reward]
    wallet_after: int
    draw_credits_after: int
    power_instance_ids: list[int] = field(default_factory=list)


@dataclass(slots=True)
class IssuedCode:
    code_id: int
    code: str
    description: str
    rewards: list[Reward]
    max_uses: int | None
    expires_at: datetime | None
    created_by: str


@dataclass(slots=True)
class CodeUsageStats:
    code: str
    is_active: bool
    usage_count: int
    max_uses: int | None
    expires_at: datetime | None
    recent_account_ids: list[int]

    @property
    def remaining_uses(self) -> int | None:
        if self.max_uses is None:
            return None
        return max(0, self.max_uses - self.usage_count)


@dataclass(slots=True)
class RedemptionHistoryItem:
    code: str
    description: str
    rewards: list[Reward]
    redeemed_at: datetime


@dataclass(slots=True)
class CodeSweepResult:
    expired: int
