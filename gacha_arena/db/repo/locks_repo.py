from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_TRY_XACT_LOCK_SQL = text("SELECT pg_try_advisory_xact_lock(:lock_id)")
_TERMINATE_STALE_HOLDERS_SQL = text(
    """
    SELECT pg_terminate_backend(activity.pid)
    FROM pg_locks AS locks
    JOIN pg_stat_activity AS activity ON activity.pid = locks.pid
    WHERE locks.locktype = 'advisory'
      AND locks.granted
      AND activity.pid <> pg_backend_pid()
      AND activity.xact_start IS NOT NULL
      AND activity.xact_start < now() - make_interval(secs => :ceiling_seconds)
    GROUP BY activity.pid
    """
)


class LocksRepo:
    @staticmethod
    async def try_xact_lock(session: AsyncSession, lock_id: int) -> bool:
        result = await session.execute(_TRY_XACT_LOCK_SQL, {"lock_id": lock_id})
        return bool(result.scalar_one())

    @staticmethod
    async def terminate_stale_holders(
        session: AsyncSession,
        *,
        ceiling_seconds: float,
    ) -> int:
        result = await session.execute(
            _TERMINATE_STALE_HOLDERS_SQL,
            {"ceiling_seconds": ceiling_seconds},
        )
        return sum(1 for terminated in result.scalars().all() if terminated)
