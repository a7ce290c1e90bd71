from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.ledger_entries import LedgerEntry


class LedgerRepo:
    @staticmethod
    async def create(session: AsyncSession, *, entry: LedgerEntry) -> LedgerEntry:
        session.add(entry)
        await session.flush()
        return entry

    @staticmethod
    async def create_many(session: AsyncSession, *, entries: list[LedgerEntry]) -> None:
        session.add_all(entries)
        await session.flush()

    @staticmethod
    async def list_for_account(
        session: AsyncSession,
        account_id: int,
        *,
        reason: str | None = None,
        limit: int = 50,
    ) -> list[LedgerEntry]:
        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.account_id == account_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(limit)
        )
        if reason is not None:
            stmt = stmt.where(LedgerEntry.reason == reason)
        result = await session.execute(stmt)
        return list(result.scalars().all())
