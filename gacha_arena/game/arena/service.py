from __future__ import annotations

from contextlib import nullcontext
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.arena_repo import ArenaRepo
from gacha_arena.economy.locks.keys import ARENA_RANKING_KEY
from gacha_arena.economy.locks.manager import get_lock_manager
from gacha_arena.game.arena.ranking import RankingCandidate, assign_positions
from gacha_arena.game.arena.types import ArenaRecomputeResult, LeaderboardRow

logger = structlog.get_logger(__name__)


class ArenaService:
    @staticmethod
    async def recompute(
        session: AsyncSession,
        *,
        now_utc: datetime | None = None,
    ) -> ArenaRecomputeResult:
        now_utc = now_utc or datetime.now(timezone.utc)
        locks = get_lock_manager()
        guard = (
            nullcontext()
            if locks.is_held(session, ARENA_RANKING_KEY)
            else locks.hold(session, ARENA_RANKING_KEY)
        )
        async with guard:
            rows = await AccountsRepo.list_ranking_rows(session)
            ranked = assign_positions(
                RankingCandidate(
                    account_id=account_id,
                    effective_cp=effective_cp,
                    battles_won=battles_won,
                    level=level,
                )
                for account_id, effective_cp, battles_won, level in rows
            )
            written = await ArenaRepo.replace_all(
                session,
                rows=[(entry.account_id, entry.position, entry.total_cp) for entry in ranked],
                now_utc=now_utc,
            )

        logger.info("arena_ranking_recomputed", ranked_accounts=written)
        return ArenaRecomputeResult(ranked_accounts=written, recomputed_at=now_utc)

    @staticmethod
    async def leaderboard(session: AsyncSession, *, limit: int = 10) -> list[LeaderboardRow]:
        rankings = await ArenaRepo.list_top(session, limit=limit)
        return [
            LeaderboardRow(
                position=ranking.rank_position,
                account_id=ranking.account_id,
                total_cp=ranking.total_cp,
            )
            for ranking in rankings
        ]

    @staticmethod
    async def position_for(session: AsyncSession, *, account_id: int) -> int | None:
        ranking = await ArenaRepo.get_for_account(session, account_id)
        if ranking is None:
            return None
        return ranking.rank_position
