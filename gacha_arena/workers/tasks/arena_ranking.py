from __future__ import annotations

import structlog

from gacha_arena.core.config import get_settings
from gacha_arena.db.session import SessionLocal
from gacha_arena.game.arena.service import ArenaService
from gacha_arena.workers.asyncio_runner import run_async_job
from gacha_arena.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def run_arena_ranking_recompute_async() -> dict[str, int]:
    async with SessionLocal.begin() as session:
        recompute = await ArenaService.recompute(session)

    result = {"ranked_accounts": recompute.ranked_accounts}
    logger.info("arena_ranking_recompute_finished", **result)
    return result


@celery_app.task(name="gacha_arena.workers.tasks.arena_ranking.run_arena_ranking_recompute")
def run_arena_ranking_recompute() -> dict[str, int]:
    return run_async_job(run_arena_ranking_recompute_async())


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "arena-ranking-recompute": {
            "task": "gacha_arena.workers.tasks.arena_ranking.run_arena_ranking_recompute",
            "schedule": float(get_settings().arena_recompute_interval_seconds),
            "options": {"queue": "q_normal"},
        },
    }
)
