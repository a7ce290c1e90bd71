from __future__ import annotations

import structlog

from gacha_arena.db.session import SessionLocal
from gacha_arena.economy.locks.manager import get_lock_manager
from gacha_arena.economy.redeem.service import RedemptionService
from gacha_arena.workers.asyncio_runner import run_async_job
from gacha_arena.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def run_redeem_code_sweep_async() -> dict[str, int]:
    async with SessionLocal.begin() as session:
        sweep = await RedemptionService.sweep_codes(session)

    result = {"expired_codes": sweep.expired}
    logger.info("redeem_code_sweep_finished", **result)
    return result


async def run_stale_lock_sweep_async() -> dict[str, int]:
    async with SessionLocal.begin() as session:
        sweep = await get_lock_manager().sweep_stale_holders(session)

    result = {
        "terminated_backends": sweep.terminated_backends,
        "dropped_handles": sweep.dropped_handles,
    }
    if sweep.terminated_backends > 0:
        logger.warning("stale_lock_holders_terminated", **result)
    else:
        logger.info("stale_lock_sweep_finished", **result)
    return result


@celery_app.task(name="gacha_arena.workers.tasks.economy_maintenance.run_redeem_code_sweep")
def run_redeem_code_sweep() -> dict[str, int]:
    return run_async_job(run_redeem_code_sweep_async())


@celery_app.task(name="gacha_arena.workers.tasks.economy_maintenance.run_stale_lock_sweep")
def run_stale_lock_sweep() -> dict[str, int]:
    return run_async_job(run_stale_lock_sweep_async())


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "redeem-code-sweep-every-10-minutes": {
            "task": "gacha_arena.workers.tasks.economy_maintenance.run_redeem_code_sweep",
            "schedule": 600.0,
            "options": {"queue": "q_normal"},
        },
        "stale-lock-sweep-every-minute": {
            "task": "gacha_arena.workers.tasks.economy_maintenance.run_stale_lock_sweep",
            "schedule": 60.0,
            "options": {"queue": "q_normal"},
        },
    }
)
