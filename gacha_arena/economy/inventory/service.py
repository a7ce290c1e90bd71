from __future__ import annotations

import random
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.accounts import Account
from gacha_arena.db.models.ledger_entries import LedgerEntry
from gacha_arena.db.models.powers import PowerDefinition, PowerInstance
from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.ledger_repo import LedgerRepo
from gacha_arena.db.repo.powers_repo import PowersRepo
from gacha_arena.economy.errors import (
    AccountNotFoundError,
    InvalidAmountError,
    NoDrawCreditsError,
    NoPowerEquippedError,
    PowerNotFoundError,
)
from gacha_arena.economy.inventory.gacha import roll_combat_power, roll_rank
from gacha_arena.economy.inventory.types import DrawnPower, DrawResult, EquipResult
from gacha_arena.economy.ledger.entries import build_entry
from gacha_arena.economy.locks.keys import account_key
from gacha_arena.economy.locks.manager import get_lock_manager
from gacha_arena.game.arena.service import ArenaService
from gacha_arena.game.combat.errors import ConfigurationError

logger = structlog.get_logger(__name__)

MAX_DRAWS_PER_REQUEST = 100


async def _get_account_for_update(session: AsyncSession, account_id: int) -> Account:
    account = await AccountsRepo.get_by_id_for_update(session, account_id)
    if account is None:
        raise AccountNotFoundError
    return account


class InventoryService:
    @staticmethod
    async def draw(
        session: AsyncSession,
        *,
        account_id: int,
        count: int = 1,
        rng: random.Random | None = None,
        now_utc: datetime | None = None,
    ) -> DrawResult:
        if isinstance(count, bool) or count <= 0 or count > MAX_DRAWS_PER_REQUEST:
            raise InvalidAmountError
        rng = rng or random.Random()
        now_utc = now_utc or datetime.now(timezone.utc)

        locks = get_lock_manager()
        async with locks.hold(session, account_key(account_id)):
            account = await _get_account_for_update(session, account_id)
            if account.draw_credits < count:
                raise NoDrawCreditsError

            account.draw_credits -= count
            result = DrawResult(account_id=account.id)
            entries: list[LedgerEntry] = [
                build_entry(
                    account_id=account.id,
                    asset="DRAW_CREDITS",
                    direction="DEBIT",
                    amount=count,
                    balance_after=account.draw_credits,
                    reason="GACHA_DRAW",
                    now_utc=now_utc,
                )
            ]
            pool_by_rank: dict[str, list[PowerDefinition]] = {}
            pity_counter = account.pity_counter

            for _ in range(count):
                rolled = roll_rank(rng, pity_counter=pity_counter)
                pity_counter = rolled.pity_counter_after
                pool = pool_by_rank.get(rolled.rank)
                if pool is None:
                    pool = await PowersRepo.list_definitions_by_rank(session, rolled.rank)
                    pool_by_rank[rolled.rank] = pool
                if not pool:
                    raise ConfigurationError(f"no power definitions for rank {rolled.rank}")

                definition = rng.choice(pool)
                instance = await PowersRepo.create_instance(
                    session,
                    instance=PowerInstance(
                        account_id=account.id,
                        power_definition_id=definition.id,
                        combat_power=roll_combat_power(rng, definition.base_cp),
                        rank=definition.rank,
                        source="DRAW",
                        acquired_at=now_utc,
                    ),
                )
                result.draws.append(
                    DrawnPower(
                        power_instance_id=instance.id,
                        power_definition_id=definition.id,
                        name=definition.name,
                        rank=definition.rank,
                        combat_power=instance.combat_power,
                        pity_triggered=rolled.pity_triggered,
                    )
                )
                entries.append(
                    build_entry(
                        account_id=account.id,
                        asset="POWER",
                        direction="CREDIT",
                        amount=1,
                        balance_after=None,
                        reason="GACHA_DRAW",
                        now_utc=now_utc,
                        metadata={
                            "power_instance_id": instance.id,
                            "power_definition_id": definition.id,
                            "power_name": definition.name,
                            "rank": definition.rank,
                            "combat_power": instance.combat_power,
                            "pity_triggered": rolled.pity_triggered,
                        },
                    )
                )

            account.pity_counter = pity_counter
            account.updated_at = now_utc
            await LedgerRepo.create_many(session, entries=entries)

        result.draw_credits_after = account.draw_credits
        result.pity_counter_after = account.pity_counter
        logger.info(
            "gacha_draw_completed",
            account_id=account_id,
            count=count,
            ranks=[drawn.rank for drawn in result.draws],
            pity_triggered=any(drawn.pity_triggered for drawn in result.draws),
            draw_credits_after=result.draw_credits_after,
        )
        return result

    @staticmethod
    async def equip(
        session: AsyncSession,
        *,
        account_id: int,
        power_instance_id: int,
        now_utc: datetime | None = None,
    ) -> EquipResult:
        now_utc = now_utc or datetime.now(timezone.utc)
        locks = get_lock_manager()
        async with locks.hold(session, account_key(account_id)):
            account = await _get_account_for_update(session, account_id)
            instance = await PowersRepo.get_owned_instance_for_update(
                session,
                account_id=account_id,
                instance_id=power_instance_id,
            )
            if instance is None:
                raise PowerNotFoundError
            account.equipped_power_id = instance.id
            account.updated_at = now_utc
            await session.flush()

        await ArenaService.recompute(session, now_utc=now_utc)
        logger.info(
            "power_equipped",
            account_id=account_id,
            power_instance_id=instance.id,
            combat_power=instance.combat_power,
        )
        return EquipResult(
            account_id=account_id,
            power_instance_id=instance.id,
            combat_power=instance.combat_power,
            effective_cp=instance.combat_power + account.bonus_cp,
            rank=instance.rank,
        )

    @staticmethod
    async def unequip(
        session: AsyncSession,
        *,
        account_id: int,
        now_utc: datetime | None = None,
    ) -> EquipResult:
        now_utc = now_utc or datetime.now(timezone.utc)
        locks = get_lock_manager()
        async with locks.hold(session, account_key(account_id)):
            account = await _get_account_for_update(session, account_id)
            if account.equipped_power_id is None:
                raise NoPowerEquippedError
            previous_id = account.equipped_power_id
            account.equipped_power_id = None
            account.updated_at = now_utc
            await session.flush()

        await ArenaService.recompute(session, now_utc=now_utc)
        logger.info("power_unequipped", account_id=account_id, power_instance_id=previous_id)
        return EquipResult(
            account_id=account_id,
            power_instance_id=None,
            combat_power=0,
            effective_cp=account.bonus_cp,
            rank=None,
        )
