from gacha_arena.economy.rewards.types import (
    Coins,
    DrawCredits,
    PowerGrant,
    Reward,
    RewardFormatError,
    describe_reward,
    parse_reward,
    parse_rewards,
    serialize_reward,
)

__all__ = [
    "Coins",
    "DrawCredits",
    "PowerGrant",
    "Reward",
    "RewardFormatError",
    "describe_reward",
    "parse_reward",
    "parse_rewards",
    "serialize_reward",
]
