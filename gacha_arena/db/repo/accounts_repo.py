from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.accounts import Account
from gacha_arena.db.models.powers import PowerInstance


class AccountsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, account_id: int) -> Account | None:
        return await session.get(Account, account_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, account_id: int) -> Account | None:
        stmt = select(Account).where(Account.id == account_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_many_for_update(
        session: AsyncSession,
        account_ids: Sequence[int],
    ) -> list[Account]:
        # Row locks are taken in ascending id order.
        stmt = (
            select(Account)
            .where(Account.id.in_(sorted(set(account_ids))))
            .order_by(Account.id.asc())
            .with_for_update()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_external_id(session: AsyncSession, external_id: str) -> Account | None:
        stmt = select(Account).where(Account.external_id == external_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, account: Account) -> Account:
        session.add(account)
        await session.flush()
        return account

    @staticmethod
    async def list_ranking_rows(session: AsyncSession) -> list[tuple[int, int, int, int]]:
        """Return (account_id, effective_cp, battles_won, level) for every account."""
        stmt = (
            select(
                Account.id,
                (func.coalesce(PowerInstance.combat_power, 0) + Account.bonus_cp).label(
                    "effective_cp"
                ),
                Account.battles_won,
                Account.level,
            )
            .select_from(Account)
            .outerjoin(
                PowerInstance,
                (PowerInstance.id == Account.equipped_power_id)
                & (PowerInstance.account_id == Account.id),
            )
        )
        result = await session.execute(stmt)
        return [
            (int(account_id), int(effective_cp), int(battles_won), int(level))
            for account_id, effective_cp, battles_won, level in result.all()
        ]

    @staticmethod
    async def sum_wallets(session: AsyncSession, account_ids: Sequence[int]) -> int:
        stmt = select(func.coalesce(func.sum(Account.wallet), 0)).where(
            Account.id.in_(list(account_ids))
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
