from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select

from gacha_arena.db.models.ledger_entries import LedgerEntry
from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.session import SessionLocal
from gacha_arena.economy.errors import InsufficientFundsError, LockTimeoutError
from gacha_arena.economy.ledger.service import LedgerService
from gacha_arena.economy.ledger.types import ALL
from gacha_arena.economy.locks.keys import account_pair_key
from gacha_arena.economy.locks.manager import get_lock_manager
from tests.integration.economy_fixtures import _create_account


async def _transfer(from_account_id: int, to_account_id: int, amount: int) -> bool:
    try:
        async with SessionLocal.begin() as session:
            await LedgerService.transfer(
                session,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=amount,
            )
    except InsufficientFundsError:
        return False
    return True


@pytest.mark.asyncio
async def test_opposing_concurrent_transfers_conserve_total_supply() -> None:
    alice = await _create_account("alice", wallet=500)
    bob = await _create_account("bob", wallet=500)

    jobs = [
        _transfer(alice, bob, 70) if index % 2 == 0 else _transfer(bob, alice, 45)
        for index in range(10)
    ]
    results = await asyncio.gather(*jobs)

    async with SessionLocal.begin() as session:
        total = await AccountsRepo.sum_wallets(session, [alice, bob])
        alice_row = await AccountsRepo.get_by_id(session, alice)
        bob_row = await AccountsRepo.get_by_id(session, bob)
        entries = await session.scalar(
            select(func.count()).select_from(LedgerEntry).where(LedgerEntry.reason == "TRANSFER")
        )

    assert total == 1000
    assert alice_row.wallet >= 0
    assert bob_row.wallet >= 0
    assert entries == 2 * sum(results)


@pytest.mark.asyncio
async def test_concurrent_overdraw_attempts_never_go_negative() -> None:
    sender = await _create_account("sender", wallet=300)
    receivers = [await _create_account(f"receiver{index}", wallet=0) for index in range(6)]

    results = await asyncio.gather(*(_transfer(sender, receiver, 100) for receiver in receivers))

    async with SessionLocal.begin() as session:
        sender_row = await AccountsRepo.get_by_id(session, sender)
        total = await AccountsRepo.sum_wallets(session, [sender, *receivers])

    assert sum(results) == 3
    assert sender_row.wallet == 0
    assert total == 300


@pytest.mark.asyncio
async def test_bank_round_trip_preserves_holdings() -> None:
    account_id = await _create_account("saver", wallet=800, bank=0)

    async with SessionLocal.begin() as session:
        deposit = await LedgerService.deposit_to_bank(session, account_id=account_id, amount=ALL)
    async with SessionLocal.begin() as session:
        withdraw = await LedgerService.withdraw_from_bank(session, account_id=account_id, amount=300)

    assert (deposit.wallet_after, deposit.bank_after) == (0, 800)
    assert (withdraw.wallet_after, withdraw.bank_after) == (300, 500)


@pytest.mark.asyncio
async def test_lock_timeout_leaves_balances_untouched() -> None:
    first = await _create_account("first", wallet=100)
    second = await _create_account("second", wallet=100)
    locks = get_lock_manager()

    async with SessionLocal.begin() as holder:
        async with locks.hold(holder, account_pair_key(first, second)):
            async with SessionLocal.begin() as contender:
                with pytest.raises(LockTimeoutError):
                    await locks.acquire(contender, account_pair_key(second, first), timeout=0.1)

    async with SessionLocal.begin() as session:
        total = await AccountsRepo.sum_wallets(session, [first, second])
    assert total == 200
