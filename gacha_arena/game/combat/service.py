from __future__ import annotations

import random
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.accounts import Account
from gacha_arena.db.models.powers import PowerInstance
from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.powers_repo import PowersRepo
from gacha_arena.economy.errors import AccountNotFoundError, NoPowerEquippedError
from gacha_arena.economy.ledger.service import LedgerService
from gacha_arena.economy.locks.keys import account_key, account_pair_key
from gacha_arena.economy.locks.manager import get_lock_manager
from gacha_arena.economy.rewards.grants import apply_rewards
from gacha_arena.economy.rewards.types import Coins
from gacha_arena.game.arena.service import ArenaService
from gacha_arena.game.combat.battle import BattleResolver
from gacha_arena.game.combat.encounters import EncounterGenerator, difficulty_label
from gacha_arena.game.combat.errors import SelfChallengeError
from gacha_arena.game.combat.rewards import pve_reward, pvp_rewards
from gacha_arena.game.combat.tiers import get_tier_catalog
from gacha_arena.game.combat.types import ArenaFightReport, BattleReport

logger = structlog.get_logger(__name__)


async def equipped_power(session: AsyncSession, account: Account) -> PowerInstance | None:
    if account.equipped_power_id is None:
        return None
    instance = await PowersRepo.get_instance(session, account.equipped_power_id)
    if instance is None or instance.account_id != account.id:
        return None
    return instance


async def effective_cp(session: AsyncSession, account: Account) -> int:
    instance = await equipped_power(session, account)
    equipped_cp = instance.combat_power if instance is not None else 0
    return equipped_cp + account.bonus_cp


async def _require_equipped_cp(session: AsyncSession, account: Account) -> int:
    if await equipped_power(session, account) is None:
        raise NoPowerEquippedError
    return await effective_cp(session, account)


class CombatService:
    @staticmethod
    async def pve_battle(
        session: AsyncSession,
        *,
        account_id: int,
        explicit_tier: str | None = None,
        rng: random.Random | None = None,
        now_utc: datetime | None = None,
    ) -> BattleReport:
        rng = rng or random.Random()
        now_utc = now_utc or datetime.now(timezone.utc)
        catalog = get_tier_catalog()
        generator = EncounterGenerator(catalog=catalog, rng=rng)
        resolver = BattleResolver(rng)

        locks = get_lock_manager()
        async with locks.hold(session, account_key(account_id)):
            account = await AccountsRepo.get_by_id_for_update(session, account_id)
            if account is None:
                raise AccountNotFoundError
            requester_cp = await _require_equipped_cp(session, account)

            encounter = None if explicit_tier else generator.maybe_special()
            if encounter is None:
                encounter = generator.generate(requester_cp, explicit_tier)
            outcome = resolver.resolve(requester_cp, encounter.combat_power)

            coins = 0
            if outcome.victory:
                # Arena positions pick up PvE wins on the next scheduled recompute.
                account.battles_won += 1
                coins = pve_reward(
                    encounter.combat_power,
                    catalog.get(encounter.tier_label).reward_multiplier,
                    rng=rng,
                    coin_multiplier=encounter.coin_multiplier,
                )
            else:
                account.battles_lost += 1
            account.updated_at = now_utc

            if coins > 0:
                grant = await LedgerService.grant_rewards(
                    session,
                    account_id=account.id,
                    rewards=[Coins(coins)],
                    reason="PVE_BATTLE",
                    metadata={
                        "opponent": encounter.name,
                        "opponent_cp": encounter.combat_power,
                        "tier": encounter.tier_label,
                    },
                    now_utc=now_utc,
                )
                wallet_after = grant.wallet_after
            else:
                await session.flush()
                wallet_after = account.wallet

        difficulty = difficulty_label(requester_cp, encounter.combat_power)
        logger.info(
            "pve_battle_resolved",
            account_id=account_id,
            requester_cp=requester_cp,
            opponent=encounter.name,
            opponent_cp=encounter.combat_power,
            tier=encounter.tier_label,
            special=encounter.is_special,
            victory=outcome.victory,
            intensity=outcome.intensity,
            coins=coins,
        )
        return BattleReport(
            account_id=account_id,
            requester_cp=requester_cp,
            encounter=encounter,
            outcome=outcome,
            difficulty=difficulty,
            coins_awarded=coins,
            wallet_after=wallet_after,
        )

    @staticmethod
    async def arena_fight(
        session: AsyncSession,
        *,
        challenger_id: int,
        defender_id: int,
        rng: random.Random | None = None,
        now_utc: datetime | None = None,
    ) -> ArenaFightReport:
        if challenger_id == defender_id:
            raise SelfChallengeError
        now_utc = now_utc or datetime.now(timezone.utc)
        resolver = BattleResolver(rng)

        locks = get_lock_manager()
        async with locks.hold(session, account_pair_key(challenger_id, defender_id)):
            accounts = await AccountsRepo.get_many_for_update(session, [challenger_id, defender_id])
            by_id = {account.id: account for account in accounts}
            challenger = by_id.get(challenger_id)
            defender = by_id.get(defender_id)
            if challenger is None or defender is None:
                raise AccountNotFoundError
            challenger_cp = await _require_equipped_cp(session, challenger)
            defender_cp = await _require_equipped_cp(session, defender)

            outcome = resolver.resolve(challenger_cp, defender_cp)
            if outcome.victory:
                winner, loser = challenger, defender
                winner_cp, loser_cp = challenger_cp, defender_cp
            else:
                winner, loser = defender, challenger
                winner_cp, loser_cp = defender_cp, challenger_cp
            winner_coins, loser_coins = pvp_rewards(
                winner_opponent_cp=loser_cp,
                loser_opponent_cp=winner_cp,
            )

            winner.battles_won += 1
            loser.battles_lost += 1
            metadata: dict[str, object] = {
                "challenger_id": challenger_id,
                "defender_id": defender_id,
            }
            for account, coins in sorted(
                ((winner, winner_coins), (loser, loser_coins)),
                key=lambda pair: pair[0].id,
            ):
                await apply_rewards(
                    session,
                    account=account,
                    rewards=[Coins(coins)],
                    reason="PVP_BATTLE",
                    source="GRANT",
                    now_utc=now_utc,
                    metadata=metadata,
                )

        await ArenaService.recompute(session, now_utc=now_utc)
        challenger_position = await ArenaService.position_for(session, account_id=challenger_id)
        defender_position = await ArenaService.position_for(session, account_id=defender_id)

        logger.info(
            "arena_fight_resolved",
            challenger_id=challenger_id,
            defender_id=defender_id,
            challenger_cp=challenger_cp,
            defender_cp=defender_cp,
            winner_id=winner.id,
            intensity=outcome.intensity,
            winner_coins=winner_coins,
            loser_coins=loser_coins,
        )
        return ArenaFightReport(
            challenger_id=challenger_id,
            defender_id=defender_id,
            challenger_cp=challenger_cp,
            defender_cp=defender_cp,
            outcome=outcome,
            winner_id=winner.id,
            loser_id=loser.id,
            winner_coins=winner_coins,
            loser_coins=loser_coins,
            challenger_position=challenger_position,
            defender_position=defender_position,
        )
