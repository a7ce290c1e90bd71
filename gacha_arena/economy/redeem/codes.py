from __future__ import annotations

import re
import secrets
from dataclasses import dataclass

from gacha_arena.economy.rewards.types import Coins, DrawCredits, Reward

CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
CODE_GROUPS = 3
CODE_GROUP_LENGTH = 3
MAX_GENERATION_ATTEMPTS = 100

_CODE_PATTERN = re.compile(r"^[A-Z0-9]{3}-[A-Z0-9]{3}-[A-Z0-9]{3}$")


@dataclass(frozen=True, slots=True)
class CodeTemplate:
    description: str
    rewards: tuple[Reward, ...]
    max_uses: int | None


CODE_TEMPLATES: dict[str, CodeTemplate] = {
    "welcome": CodeTemplate(
        description="Welcome bonus for new players",
        rewards=(Coins(1000), DrawCredits(2)),
        max_uses=100,
    ),
    "draw2x": CodeTemplate(
        description="Double draw chances",
        rewards=(DrawCredits(2),),
        max_uses=50,
    ),
    "mega_reward": CodeTemplate(
        description="Mega reward pack",
        rewards=(Coins(5000), DrawCredits(5)),
        max_uses=25,
    ),
    "daily_bonus": CodeTemplate(
        description="Daily bonus reward",
        rewards=(Coins(500), DrawCredits(1)),
        max_uses=200,
    ),
}


def generate_code() -> str:
    return "-".join(
        "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_GROUP_LENGTH))
        for _ in range(CODE_GROUPS)
    )


def normalize_code(raw_code: str) -> str:
    return raw_code.strip().upper()


def is_valid_code(code: str) -> bool:
    return _CODE_PATTERN.fullmatch(code) is not None
