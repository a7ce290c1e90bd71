from __future__ import annotations

from datetime import datetime, timezone

from gacha_arena.db.models.accounts import Account
from gacha_arena.db.models.powers import PowerDefinition, PowerInstance
from gacha_arena.db.models.redeem_codes import RedeemCode
from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.powers_repo import PowersRepo
from gacha_arena.db.repo.redeem_codes_repo import RedeemCodesRepo
from gacha_arena.db.session import SessionLocal

UTC = timezone.utc


async def _create_account(
    name: str,
    *,
    wallet: int = 1000,
    bank: int = 0,
    draw_credits: int = 10,
    bonus_cp: int = 0,
) -> int:
    now_utc = datetime.now(UTC)
    async with SessionLocal.begin() as session:
        account = await AccountsRepo.create(
            session,
            account=Account(
                external_id=f"ext-{name}",
                username=name,
                wallet=wallet,
                bank=bank,
                draw_credits=draw_credits,
                bonus_cp=bonus_cp,
                battles_won=0,
                battles_lost=0,
                level=1,
                pity_counter=0,
                created_at=now_utc,
                updated_at=now_utc,
            ),
        )
        return account.id


async def _create_definition(name: str, *, rank: str, base_cp: int) -> int:
    async with SessionLocal.begin() as session:
        definition = PowerDefinition(name=name, rank=rank, base_cp=base_cp, base_price=base_cp * 10)
        session.add(definition)
        await session.flush()
        return definition.id


async def _give_power(account_id: int, definition_id: int, *, combat_power: int, rank: str) -> int:
    async with SessionLocal.begin() as session:
        instance = await PowersRepo.create_instance(
            session,
            instance=PowerInstance(
                account_id=account_id,
                power_definition_id=definition_id,
                combat_power=combat_power,
                rank=rank,
                source="GRANT",
                acquired_at=datetime.now(UTC),
            ),
        )
        return instance.id


async def _create_code(
    code: str,
    *,
    rewards: list[dict[str, object]],
    max_uses: int | None = None,
    expires_at: datetime | None = None,
) -> int:
    now_utc = datetime.now(UTC)
    async with SessionLocal.begin() as session:
        redeem_code = await RedeemCodesRepo.create(
            session,
            redeem_code=RedeemCode(
                code=code,
                description="integration",
                rewards=rewards,
                max_uses=max_uses,
                expires_at=expires_at,
                is_active=True,
                created_by="tests",
                created_at=now_utc,
                updated_at=now_utc,
            ),
        )
        return redeem_code.id
