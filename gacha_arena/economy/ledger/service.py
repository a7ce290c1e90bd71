from __future__ import annotations

from contextlib import nullcontext
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.db.models.accounts import Account
from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.ledger_repo import LedgerRepo
from gacha_arena.economy.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    NegativeBalanceError,
)
from gacha_arena.economy.ledger.entries import build_entry
from gacha_arena.economy.ledger.types import (
    ALL,
    AmountOrAll,
    BankMoveResult,
    GrantResult,
    PurchaseDrawsResult,
    TransferResult,
    WagerResult,
)
from gacha_arena.economy.locks.keys import account_key, account_pair_key
from gacha_arena.economy.locks.manager import get_lock_manager
from gacha_arena.economy.rewards.grants import apply_rewards
from gacha_arena.economy.rewards.types import Reward

logger = structlog.get_logger(__name__)

DRAW_PRICE_COINS = 1000
MAX_DRAWS_PER_PURCHASE = 100


def _require_positive(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError


async def _get_account_for_update(session: AsyncSession, account_id: int) -> Account:
    account = await AccountsRepo.get_by_id_for_update(session, account_id)
    if account is None:
        raise AccountNotFoundError
    return account


class LedgerService:
    @staticmethod
    async def transfer(
        session: AsyncSession,
        *,
        from_account_id: int,
        to_account_id: int,
        amount: int,
        now_utc: datetime | None = None,
    ) -> TransferResult:
        _require_positive(amount)
        if from_account_id == to_account_id:
            raise InvalidAmountError
        now_utc = now_utc or datetime.now(timezone.utc)

        locks = get_lock_manager()
        async with locks.hold(session, account_pair_key(from_account_id, to_account_id)):
            accounts = await AccountsRepo.get_many_for_update(
                session, [from_account_id, to_account_id]
            )
            by_id = {account.id: account for account in accounts}
            sender = by_id.get(from_account_id)
            recipient = by_id.get(to_account_id)
            if sender is None or recipient is None:
                raise AccountNotFoundError
            if sender.wallet < amount:
                raise InsufficientFundsError

            sender.wallet -= amount
            recipient.wallet += amount
            sender.updated_at = now_utc
            recipient.updated_at = now_utc

            await LedgerRepo.create_many(
                session,
                entries=[
                    build_entry(
                        account_id=sender.id,
                        counterparty_account_id=recipient.id,
                        asset="WALLET",
                        direction="DEBIT",
                        amount=amount,
                        balance_after=sender.wallet,
                        reason="TRANSFER",
                        now_utc=now_utc,
                    ),
                    build_entry(
                        account_id=recipient.id,
                        counterparty_account_id=sender.id,
                        asset="WALLET",
                        direction="CREDIT",
                        amount=amount,
                        balance_after=recipient.wallet,
                        reason="TRANSFER",
                        now_utc=now_utc,
                    ),
                ],
            )

        logger.info(
            "ledger_transfer_applied",
            actor=from_account_id,
            counterparty=to_account_id,
            delta=-amount,
            wallet_after=sender.wallet,
            counterparty_wallet_after=recipient.wallet,
            reason="TRANSFER",
        )
        return TransferResult(
            from_account_id=sender.id,
            to_account_id=recipient.id,
            amount=amount,
            from_wallet_after=sender.wallet,
            to_wallet_after=recipient.wallet,
        )

    @staticmethod
    async def wager(
        session: AsyncSession,
        *,
        account_id: int,
        stake: int,
        payout: int,
        reason: str = "WAGER",
        now_utc: datetime | None = None,
    ) -> WagerResult:
        _require_positive(stake)
        if isinstance(payout, bool) or not isinstance(payout, int) or payout < 0:
            raise InvalidAmountError
        now_utc = now_utc or datetime.now(timezone.utc)

        locks = get_lock_manager()
        async with locks.hold(session, account_key(account_id)):
            account = await _get_account_for_update(session, account_id)
            if account.wallet < stake:
                raise InsufficientFundsError
            net = payout - stake
            if account.wallet + net < 0:
                raise NegativeBalanceError

            wallet_after_stake = account.wallet - stake
            account.wallet += net
            account.updated_at = now_utc

            entries = [
                build_entry(
                    account_id=account.id,
                    asset="WALLET",
                    direction="DEBIT",
                    amount=stake,
                    balance_after=wallet_after_stake,
                    reason=reason,
                    now_utc=now_utc,
                )
            ]
            if payout > 0:
                entries.append(
                    build_entry(
                        account_id=account.id,
                        asset="WALLET",
                        direction="CREDIT",
                        amount=payout,
                        balance_after=account.wallet,
                        reason=reason,
                        now_utc=now_utc,
                    )
                )
            await LedgerRepo.create_many(session, entries=entries)

        logger.info(
            "ledger_wager_settled",
            actor=account_id,
            stake=stake,
            payout=payout,
            delta=net,
            wallet_after=account.wallet,
            reason=reason,
        )
        return WagerResult(
            account_id=account.id,
            stake=stake,
            payout=payout,
            net=net,
            wallet_after=account.wallet,
        )

    @staticmethod
    async def _move_between_wallet_and_bank(
        session: AsyncSession,
        *,
        account_id: int,
        amount: AmountOrAll,
        to_bank: bool,
        now_utc: datetime | None,
    ) -> BankMoveResult:
        if amount != ALL:
            _require_positive(amount)
        now_utc = now_utc or datetime.now(timezone.utc)
        reason = "BANK_DEPOSIT" if to_bank else "BANK_WITHDRAW"

        locks = get_lock_manager()
        async with locks.hold(session, account_key(account_id)):
            account = await _get_account_for_update(session, account_id)
            available = account.wallet if to_bank else account.bank
            resolved = available if amount == ALL else int(amount)
            if resolved <= 0 or resolved > available:
                raise InsufficientFundsError

            if to_bank:
                account.wallet -= resolved
                account.bank += resolved
            else:
                account.bank -= resolved
                account.wallet += resolved
            account.updated_at = now_utc

            await LedgerRepo.create_many(
                session,
                entries=[
                    build_entry(
                        account_id=account.id,
                        asset="WALLET",
                        direction="DEBIT" if to_bank else "CREDIT",
                        amount=resolved,
                        balance_after=account.wallet,
                        reason=reason,
                        now_utc=now_utc,
                    ),
                    build_entry(
                        account_id=account.id,
                        asset="BANK",
                        direction="CREDIT" if to_bank else "DEBIT",
                        amount=resolved,
                        balance_after=account.bank,
                        reason=reason,
                        now_utc=now_utc,
                    ),
                ],
            )

        logger.info(
            "ledger_bank_moved",
            actor=account_id,
            delta=-resolved if to_bank else resolved,
            wallet_after=account.wallet,
            bank_after=account.bank,
            reason=reason,
        )
        return BankMoveResult(
            account_id=account.id,
            amount=resolved,
            wallet_after=account.wallet,
            bank_after=account.bank,
        )

    @staticmethod
    async def deposit_to_bank(
        session: AsyncSession,
        *,
        account_id: int,
        amount: AmountOrAll,
        now_utc: datetime | None = None,
    ) -> BankMoveResult:
        return await LedgerService._move_between_wallet_and_bank(
            session,
            account_id=account_id,
            amount=amount,
            to_bank=True,
            now_utc=now_utc,
        )

    @staticmethod
    async def withdraw_from_bank(
        session: AsyncSession,
        *,
        account_id: int,
        amount: AmountOrAll,
        now_utc: datetime | None = None,
    ) -> BankMoveResult:
        return await LedgerService._move_between_wallet_and_bank(
            session,
            account_id=account_id,
            amount=amount,
            to_bank=False,
            now_utc=now_utc,
        )

    @staticmethod
    async def grant_rewards(
        session: AsyncSession,
        *,
        account_id: int,
        rewards: list[Reward],
        reason: str,
        source: str = "GRANT",
        metadata: dict[str, object] | None = None,
        now_utc: datetime | None = None,
    ) -> GrantResult:
        now_utc = now_utc or datetime.now(timezone.utc)
        locks = get_lock_manager()
        key = account_key(account_id)
        guard = nullcontext() if locks.is_held(session, key) else locks.hold(session, key)
        async with guard:
            account = await _get_account_for_update(session, account_id)
            return await apply_rewards(
                session,
                account=account,
                rewards=rewards,
                reason=reason,
                source=source,
                now_utc=now_utc,
                metadata=metadata,
            )

    @staticmethod
    async def purchase_draws(
        session: AsyncSession,
        *,
        account_id: int,
        count: int,
        now_utc: datetime | None = None,
    ) -> PurchaseDrawsResult:
        _require_positive(count)
        if count > MAX_DRAWS_PER_PURCHASE:
            raise InvalidAmountError
        now_utc = now_utc or datetime.now(timezone.utc)
        cost = count * DRAW_PRICE_COINS

        locks = get_lock_manager()
        async with locks.hold(session, account_key(account_id)):
            account = await _get_account_for_update(session, account_id)
            if account.wallet < cost:
                raise InsufficientFundsError
            account.wallet -= cost
            account.draw_credits += count
            account.updated_at = now_utc

            await LedgerRepo.create_many(
                session,
                entries=[
                    build_entry(
                        account_id=account.id,
                        asset="WALLET",
                        direction="DEBIT",
                        amount=cost,
                        balance_after=account.wallet,
                        reason="DRAW_PURCHASE",
                        now_utc=now_utc,
                    ),
                    build_entry(
                        account_id=account.id,
                        asset="DRAW_CREDITS",
                        direction="CREDIT",
                        amount=count,
                        balance_after=account.draw_credits,
                        reason="DRAW_PURCHASE",
                        now_utc=now_utc,
                    ),
                ],
            )

        logger.info(
            "ledger_draws_purchased",
            actor=account_id,
            delta=-cost,
            count=count,
            wallet_after=account.wallet,
            draw_credits_after=account.draw_credits,
            reason="DRAW_PURCHASE",
        )
        return PurchaseDrawsResult(
            account_id=account.id,
            count=count,
            cost=cost,
            wallet_after=account.wallet,
            draw_credits_after=account.draw_credits,
        )
