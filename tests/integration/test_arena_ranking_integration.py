from __future__ import annotations

import asyncio
import random

import pytest
from sqlalchemy import func, select

from gacha_arena.db.models.arena_rankings import ArenaRanking
from gacha_arena.db.models.ledger_entries import LedgerEntry
from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.powers_repo import PowersRepo
from gacha_arena.db.session import SessionLocal
from gacha_arena.economy.inventory.service import InventoryService
from gacha_arena.game.arena.service import ArenaService
from gacha_arena.game.combat.service import CombatService
from tests.integration.economy_fixtures import _create_account, _create_definition, _give_power


async def _seed_catalog() -> None:
    for rank, base_cp in (
        ("Normal", 50),
        ("Rare", 150),
        ("Epic", 600),
        ("Legendary", 2000),
        ("Mythic", 6000),
    ):
        await _create_definition(f"{rank} Relic", rank=rank, base_cp=base_cp)


async def _equip(account_id: int, instance_id: int) -> None:
    async with SessionLocal.begin() as session:
        await InventoryService.equip(
            session,
            account_id=account_id,
            power_instance_id=instance_id,
        )


@pytest.mark.asyncio
async def test_draws_create_owned_powers_and_consume_credits() -> None:
    await _seed_catalog()
    account_id = await _create_account("drawer", draw_credits=5)

    async with SessionLocal.begin() as session:
        result = await InventoryService.draw(
            session,
            account_id=account_id,
            count=5,
            rng=random.Random(7),
        )
    async with SessionLocal.begin() as session:
        account = await AccountsRepo.get_by_id(session, account_id)
        owned = await PowersRepo.list_for_account(session, account_id)

    assert len(result.draws) == 5
    assert account.draw_credits == 0
    assert account.pity_counter == result.pity_counter_after
    assert sorted(power.id for power in owned) == sorted(
        drawn.power_instance_id for drawn in result.draws
    )


@pytest.mark.asyncio
async def test_concurrent_equips_leave_consistent_leaderboard() -> None:
    definition_id = await _create_definition("Arena Relic", rank="Epic", base_cp=600)
    accounts = []
    for index, combat_power in enumerate((500, 900, 700, 900)):
        account_id = await _create_account(f"fighter{index}", bonus_cp=0)
        instance_id = await _give_power(
            account_id,
            definition_id,
            combat_power=combat_power,
            rank="Epic",
        )
        accounts.append((account_id, instance_id))

    await asyncio.gather(*(_equip(account_id, instance_id) for account_id, instance_id in accounts))

    async with SessionLocal.begin() as session:
        leaderboard = await ArenaService.leaderboard(session, limit=10)
        ranked = await session.scalar(select(func.count()).select_from(ArenaRanking))

    ids = [account_id for account_id, _ in accounts]
    assert ranked == 4
    assert [row.position for row in leaderboard] == [1, 2, 3, 4]
    assert [row.account_id for row in leaderboard] == [ids[1], ids[3], ids[2], ids[0]]
    assert [row.total_cp for row in leaderboard] == [900, 900, 700, 500]


@pytest.mark.asyncio
async def test_arena_fight_pays_both_sides_and_updates_positions() -> None:
    definition_id = await _create_definition("Duel Relic", rank="Legendary", base_cp=2000)
    challenger = await _create_account("challenger", wallet=0)
    defender = await _create_account("defender", wallet=0)
    await _equip(
        challenger,
        await _give_power(challenger, definition_id, combat_power=3000, rank="Legendary"),
    )
    await _equip(
        defender,
        await _give_power(defender, definition_id, combat_power=1000, rank="Epic"),
    )

    async with SessionLocal.begin() as session:
        report = await CombatService.arena_fight(
            session,
            challenger_id=challenger,
            defender_id=defender,
            rng=random.Random(3),
        )
    async with SessionLocal.begin() as session:
        total = await AccountsRepo.sum_wallets(session, [challenger, defender])
        entries = await session.scalar(
            select(func.count())
            .select_from(LedgerEntry)
            .where(LedgerEntry.reason == "PVP_BATTLE")
        )

    assert {report.winner_id, report.loser_id} == {challenger, defender}
    assert total == report.winner_coins + report.loser_coins
    assert entries == 2
    assert {report.challenger_position, report.defender_position} == {1, 2}
