from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.accounts import Account
from gacha_arena.db.models.ledger_entries import LedgerEntry
from gacha_arena.db.models.powers import PowerInstance
from gacha_arena.db.repo.powers_repo import PowersRepo
from gacha_arena.economy.errors import InvalidAmountError, PowerNotFoundError
from gacha_arena.economy.ledger.entries import build_entry
from gacha_arena.economy.ledger.types import GrantResult
from gacha_arena.economy.rewards.types import Coins, DrawCredits, PowerGrant, Reward
from gacha_arena.game.combat.tiers import get_tier_catalog

logger = structlog.get_logger(__name__)


async def apply_rewards(
    session: AsyncSession,
    *,
    account: Account,
    rewards: list[Reward],
    reason: str,
    source: str,
    now_utc: datetime,
    metadata: dict[str, object] | None = None,
) -> GrantResult:
    """Apply rewards to an account row the caller already holds FOR UPDATE."""
    result = GrantResult(account_id=account.id)
    entries: list[LedgerEntry] = []
    for reward in rewards:
        match reward:
            case Coins(amount=amount):
                if amount <= 0:
                    raise InvalidAmountError
                account.wallet += amount
                result.coins += amount
                entries.append(
                    build_entry(
                        account_id=account.id,
                        asset="WALLET",
                        direction="CREDIT",
                        amount=amount,
                        balance_after=account.wallet,
                        reason=reason,
                        now_utc=now_utc,
                        metadata=metadata,
                    )
                )
            case DrawCredits(amount=amount):
                if amount <= 0:
                    raise InvalidAmountError
                account.draw_credits += amount
                result.draw_credits += amount
                entries.append(
                    build_entry(
                        account_id=account.id,
                        asset="DRAW_CREDITS",
                        direction="CREDIT",
                        amount=amount,
                        balance_after=account.draw_credits,
                        reason=reason,
                        now_utc=now_utc,
                        metadata=metadata,
                    )
                )
            case PowerGrant(definition_id=definition_id, combat_power=combat_power):
                definition = await PowersRepo.get_definition(session, definition_id)
                if definition is None:
                    raise PowerNotFoundError
                granted_cp = definition.base_cp if combat_power is None else combat_power
                instance = await PowersRepo.create_instance(
                    session,
                    instance=PowerInstance(
                        account_id=account.id,
                        power_definition_id=definition.id,
                        combat_power=granted_cp,
                        rank=get_tier_catalog().tier_for(granted_cp).label,
                        source=source,
                        acquired_at=now_utc,
                    ),
                )
                result.power_instance_ids.append(instance.id)
                entries.append(
                    build_entry(
                        account_id=account.id,
                        asset="POWER",
                        direction="CREDIT",
                        amount=1,
                        balance_after=None,
                        reason=reason,
                        now_utc=now_utc,
                        metadata={
                            **(metadata or {}),
                            "power_instance_id": instance.id,
                            "power_definition_id": definition.id,
                            "combat_power": instance.combat_power,
                        },
                    )
                )

    account.updated_at = now_utc
    result.wallet_after = account.wallet
    result.draw_credits_after = account.draw_credits
    if entries:
        session.add_all(entries)
        await session.flush()

    logger.info(
        "ledger_rewards_granted",
        account_id=account.id,
        reason=reason,
        coins=result.coins,
        draw_credits=result.draw_credits,
        powers=len(result.power_instance_ids),
        wallet_after=result.wallet_after,
    )
    return result
