from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.arena_rankings import ArenaRanking


class ArenaRepo:
    @staticmethod
    async def replace_all(
        session: AsyncSession,
        *,
        rows: list[tuple[int, int, int]],
        now_utc: datetime,
    ) -> int:
        """Replace the ranking table with (account_id, rank_position, total_cp) rows."""
        await session.execute(delete(ArenaRanking))
        if not rows:
            return 0
        await session.execute(
            insert(ArenaRanking),
            [
                {
                    "account_id": account_id,
                    "rank_position": position,
                    "total_cp": total_cp,
                    "updated_at": now_utc,
                }
                for account_id, position, total_cp in rows
            ],
        )
        return len(rows)

    @staticmethod
    async def get_for_account(session: AsyncSession, account_id: int) -> ArenaRanking | None:
        return await session.get(ArenaRanking, account_id)

    @staticmethod
    async def list_top(session: AsyncSession, *, limit: int = 10) -> list[ArenaRanking]:
        stmt = select(ArenaRanking).order_by(ArenaRanking.rank_position.asc()).limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())
