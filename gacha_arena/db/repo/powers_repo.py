from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.powers import PowerDefinition, PowerInstance


class PowersRepo:
    @staticmethod
    async def get_definition(session: AsyncSession, definition_id: int) -> PowerDefinition | None:
        return await session.get(PowerDefinition, definition_id)

    @staticmethod
    async def list_definitions_by_rank(
        session: AsyncSession,
        rank: str,
    ) -> list[PowerDefinition]:
        stmt = (
            select(PowerDefinition)
            .where(PowerDefinition.rank == rank)
            .order_by(PowerDefinition.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_instance(session: AsyncSession, instance_id: int) -> PowerInstance | None:
        return await session.get(PowerInstance, instance_id)

    @staticmethod
    async def get_owned_instance_for_update(
        session: AsyncSession,
        *,
        account_id: int,
        instance_id: int,
    ) -> PowerInstance | None:
        stmt = (
            select(PowerInstance)
            .where(
                PowerInstance.id == instance_id,
                PowerInstance.account_id == account_id,
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_account(
        session: AsyncSession,
        account_id: int,
        *,
        limit: int = 100,
    ) -> list[PowerInstance]:
        stmt = (
            select(PowerInstance)
            .where(PowerInstance.account_id == account_id)
            .order_by(PowerInstance.combat_power.desc(), PowerInstance.id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create_instance(
        session: AsyncSession,
        *,
        instance: PowerInstance,
    ) -> PowerInstance:
        session.add(instance)
        await session.flush()
        return instance
