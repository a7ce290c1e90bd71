from gacha_arena.workers.tasks.arena_ranking import run_arena_ranking_recompute
from gacha_arena.workers.tasks.economy_maintenance import (
    run_redeem_code_sweep,
    run_stale_lock_sweep,
)

__all__ = [
    "run_arena_ranking_recompute",
    "run_redeem_code_sweep",
    "run_stale_lock_sweep",
]
