from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.redeem_codes import CodeUsage, RedeemCode


class RedeemCodesRepo:
    @staticmethod
    async def get_by_code(session: AsyncSession, code: str) -> RedeemCode | None:
        stmt = select(RedeemCode).where(RedeemCode.code == code)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_code_for_update(session: AsyncSession, code: str) -> RedeemCode | None:
        stmt = select(RedeemCode).where(RedeemCode.code == code).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def code_exists(session: AsyncSession, code: str) -> bool:
        stmt = select(RedeemCode.id).where(RedeemCode.code == code)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def create(session: AsyncSession, *, redeem_code: RedeemCode) -> RedeemCode:
        session.add(redeem_code)
        await session.flush()
        return redeem_code

    @staticmethod
    async def count_usages(session: AsyncSession, code_id: int) -> int:
        stmt = select(func.count(CodeUsage.id)).where(CodeUsage.code_id == code_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def create_usage(session: AsyncSession, *, usage: CodeUsage) -> CodeUsage:
        session.add(usage)
        await session.flush()
        return usage

    @staticmethod
    async def list_usages_for_code(
        session: AsyncSession,
        code_id: int,
        *,
        limit: int = 50,
    ) -> list[CodeUsage]:
        stmt = (
            select(CodeUsage)
            .where(CodeUsage.code_id == code_id)
            .order_by(CodeUsage.redeemed_at.desc(), CodeUsage.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_history_for_account(
        session: AsyncSession,
        account_id: int,
        *,
        limit: int = 20,
    ) -> list[tuple[CodeUsage, RedeemCode]]:
        stmt = (
            select(CodeUsage, RedeemCode)
            .join(RedeemCode, RedeemCode.id == CodeUsage.code_id)
            .where(CodeUsage.account_id == account_id)
            .order_by(CodeUsage.redeemed_at.desc(), CodeUsage.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(usage, code) for usage, code in result.all()]

    @staticmethod
    async def deactivate_expired(session: AsyncSession, *, now_utc: datetime) -> int:
        stmt = (
            update(RedeemCode)
            .where(
                RedeemCode.is_active.is_(True),
                RedeemCode.expires_at.is_not(None),
                RedeemCode.expires_at <= now_utc,
            )
            .values(is_active=False, updated_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
