from __future__ import annotations

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from gacha_arena.core.config import get_settings
from gacha_arena.db.session import SessionLocal
from gacha_arena.game.arena.service import ArenaService

from .internal_helpers import assert_internal_access

router = APIRouter(tags=["internal", "arena"])


class LeaderboardEntry(BaseModel):
    position: int = Field(ge=1)
    account_id: int
    total_cp: int = Field(ge=0)


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]


@router.get("/internal/arena/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    request: Request,
    limit: int = Query(default=10, ge=1, le=100),
) -> LeaderboardResponse:
    assert_internal_access(request, settings=get_settings())

    async with SessionLocal.begin() as session:
        rows = await ArenaService.leaderboard(session, limit=limit)

    return LeaderboardResponse(
        entries=[
            LeaderboardEntry(position=row.position, account_id=row.account_id, total_cp=row.total_cp)
            for row in rows
        ]
    )
