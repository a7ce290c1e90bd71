from gacha_arena.economy.locks.keys import (
    ARENA_RANKING_KEY,
    account_key,
    account_pair_key,
    advisory_lock_id,
    redeem_key,
)
from gacha_arena.economy.locks.manager import (
    LockHandle,
    LockSweepResult,
    ResourceLockManager,
    get_lock_manager,
)

__all__ = [
    "ARENA_RANKING_KEY",
    "LockHandle",
    "LockSweepResult",
    "ResourceLockManager",
    "account_key",
    "account_pair_key",
    "advisory_lock_id",
    "get_lock_manager",
    "redeem_key",
]
