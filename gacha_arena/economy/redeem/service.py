from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.redeem_codes import CodeUsage, RedeemCode
from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.redeem_codes_repo import RedeemCodesRepo
from gacha_arena.economy.errors import (
    AccountNotFoundError,
    AlreadyRedeemedError,
    CodeExpiredError,
    CodeGenerationError,
    EconomyError,
    InvalidAmountError,
    InvalidCodeError,
    UnknownCodeTemplateError,
    UsageExceededError,
)
from gacha_arena.economy.ledger.service import LedgerService
from gacha_arena.economy.locks.keys import account_key, redeem_key
from gacha_arena.economy.locks.manager import get_lock_manager
from gacha_arena.economy.redeem.codes import (
    CODE_TEMPLATES,
    MAX_GENERATION_ATTEMPTS,
    generate_code,
    is_valid_code,
    normalize_code,
)
from gacha_arena.economy.redeem.guard import InFlightRedemptions
from gacha_arena.economy.redeem.types import (
    CodeSweepResult,
    CodeUsageStats,
    IssuedCode,
    RedeemResult,
    RedemptionHistoryItem,
)
from gacha_arena.economy.rewards.types import Reward, parse_rewards, serialize_reward

logger = structlog.get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RedemptionService:
    def __init__(self, *, in_flight: InFlightRedemptions | None = None) -> None:
        self.in_flight = in_flight if in_flight is not None else InFlightRedemptions()

    async def redeem(
        self,
        session: AsyncSession,
        *,
        code: str,
        account_id: int,
        now_utc: datetime | None = None,
    ) -> RedeemResult:
        normalized = normalize_code(code)
        now_utc = now_utc or datetime.now(timezone.utc)
        try:
            with self.in_flight.claim(normalized, account_id):
                result = await self._redeem_claimed(
                    session,
                    code=normalized,
                    account_id=account_id,
                    now_utc=now_utc,
                )
        except EconomyError as exc:
            logger.info(
                "redeem_attempt",
                code=normalized,
                account_id=account_id,
                outcome=exc.code,
            )
            raise

        logger.info(
            "redeem_attempt",
            code=normalized,
            account_id=account_id,
            outcome="REDEEMED",
            wallet_after=result.wallet_after,
            draw_credits_after=result.draw_credits_after,
        )
        return result

    async def _redeem_claimed(
        self,
        session: AsyncSession,
        *,
        code: str,
        account_id: int,
        now_utc: datetime,
    ) -> RedeemResult:
        if not is_valid_code(code):
            raise InvalidCodeError

        locks = get_lock_manager()
        async with locks.hold(session, redeem_key(code)):
            async with locks.hold(session, account_key(account_id)):
                redeem_code = await RedeemCodesRepo.get_by_code_for_update(session, code)
                if redeem_code is None or not redeem_code.is_active:
                    raise InvalidCodeError
                if redeem_code.expires_at is not None and _as_utc(redeem_code.expires_at) <= now_utc:
                    raise CodeExpiredError

                usage_count = await RedeemCodesRepo.count_usages(session, redeem_code.id)
                if redeem_code.max_uses is not None and usage_count >= redeem_code.max_uses:
                    raise UsageExceededError

                account = await AccountsRepo.get_by_id_for_update(session, account_id)
                if account is None:
                    raise AccountNotFoundError

                try:
                    async with session.begin_nested():
                        await RedeemCodesRepo.create_usage(
                            session,
                            usage=CodeUsage(
                                code_id=redeem_code.id,
                                account_id=account_id,
                                redeemed_at=now_utc,
                            ),
                        )
                except IntegrityError as exc:
                    raise AlreadyRedeemedError from exc

                rewards = parse_rewards(redeem_code.rewards)
                grant = await LedgerService.grant_rewards(
                    session,
                    account_id=account_id,
                    rewards=rewards,
                    reason="REDEEM",
                    source="REDEEM",
                    metadata={"redeem_code_id": redeem_code.id},
                    now_utc=now_utc,
                )

        return RedeemResult(
            code=redeem_code.code,
            description=redeem_code.description,
            rewards=rewards,
            wallet_after=grant.wallet_after,
            draw_credits_after=grant.draw_credits_after,
            power_instance_ids=list(grant.power_instance_ids),
        )

    @staticmethod
    async def _generate_unique_code(session: AsyncSession) -> str:
        for _ in range(MAX_GENERATION_ATTEMPTS):
            candidate = generate_code()
            if not await RedeemCodesRepo.code_exists(session, candidate):
                return candidate
        raise CodeGenerationError

    async def issue_code(
        self,
        session: AsyncSession,
        *,
        rewards: list[Reward],
        created_by: str,
        description: str = "No description",
        max_uses: int | None = None,
        expires_at: datetime | None = None,
        now_utc: datetime | None = None,
    ) -> IssuedCode:
        if not rewards:
            raise InvalidAmountError
        if max_uses is not None and max_uses <= 0:
            raise InvalidAmountError
        now_utc = now_utc or datetime.now(timezone.utc)

        code = await self._generate_unique_code(session)
        redeem_code = await RedeemCodesRepo.create(
            session,
            redeem_code=RedeemCode(
                code=code,
                description=description,
                rewards=[serialize_reward(reward) for reward in rewards],
                max_uses=max_uses,
                expires_at=expires_at,
                is_active=True,
                created_by=created_by,
                created_at=now_utc,
                updated_at=now_utc,
            ),
        )
        logger.info(
            "redeem_code_issued",
            code=code,
            created_by=created_by,
            max_uses=max_uses,
            expires_at=expires_at.isoformat() if expires_at is not None else None,
        )
        return IssuedCode(
            code_id=redeem_code.id,
            code=code,
            description=description,
            rewards=list(rewards),
            max_uses=max_uses,
            expires_at=expires_at,
            created_by=created_by,
        )

    async def issue_from_template(
        self,
        session: AsyncSession,
        *,
        template_name: str,
        created_by: str = "Admin",
        now_utc: datetime | None = None,
    ) -> IssuedCode:
        template = CODE_TEMPLATES.get(template_name)
        if template is None:
            raise UnknownCodeTemplateError(template_name)
        return await self.issue_code(
            session,
            rewards=list(template.rewards),
            created_by=created_by,
            description=template.description,
            max_uses=template.max_uses,
            now_utc=now_utc,
        )

    @staticmethod
    async def deactivate_code(
        session: AsyncSession,
        *,
        code: str,
        now_utc: datetime | None = None,
    ) -> bool:
        redeem_code = await RedeemCodesRepo.get_by_code_for_update(session, normalize_code(code))
        if redeem_code is None:
            raise InvalidCodeError
        if not redeem_code.is_active:
            return False
        redeem_code.is_active = False
        redeem_code.updated_at = now_utc or datetime.now(timezone.utc)
        logger.info("redeem_code_deactivated", code=redeem_code.code)
        return True

    @staticmethod
    async def usage_stats(
        session: AsyncSession,
        *,
        code: str,
        recent_limit: int = 10,
    ) -> CodeUsageStats:
        redeem_code = await RedeemCodesRepo.get_by_code(session, normalize_code(code))
        if redeem_code is None:
            raise InvalidCodeError
        usage_count = await RedeemCodesRepo.count_usages(session, redeem_code.id)
        recent = await RedeemCodesRepo.list_usages_for_code(
            session,
            redeem_code.id,
            limit=recent_limit,
        )
        return CodeUsageStats(
            code=redeem_code.code,
            is_active=redeem_code.is_active,
            usage_count=usage_count,
            max_uses=redeem_code.max_uses,
            expires_at=redeem_code.expires_at,
            recent_account_ids=[usage.account_id for usage in recent],
        )

    @staticmethod
    async def history_for_account(
        session: AsyncSession,
        *,
        account_id: int,
        limit: int = 20,
    ) -> list[RedemptionHistoryItem]:
        rows = await RedeemCodesRepo.list_history_for_account(session, account_id, limit=limit)
        return [
            RedemptionHistoryItem(
                code=redeem_code.code,
                description=redeem_code.description,
                rewards=parse_rewards(redeem_code.rewards),
                redeemed_at=usage.redeemed_at,
            )
            for usage, redeem_code in rows
        ]

    @staticmethod
    async def sweep_codes(
        session: AsyncSession,
        *,
        now_utc: datetime | None = None,
    ) -> CodeSweepResult:
        now_utc = now_utc or datetime.now(timezone.utc)
        expired = await RedeemCodesRepo.deactivate_expired(session, now_utc=now_utc)
        return CodeSweepResult(expired=expired)


redemption_service = RedemptionService()
