from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from gacha_arena.db.models.ledger_entries import LedgerEntry
from gacha_arena.db.models.redeem_codes import CodeUsage, RedeemCode
from gacha_arena.db.repo.locks_repo import LocksRepo
from gacha_arena.db.repo.redeem_codes_repo import RedeemCodesRepo
from gacha_arena.economy.errors import (
    AccountNotFoundError,
    AlreadyRedeemedError,
    CodeExpiredError,
    CodeGenerationError,
    InvalidCodeError,
    RedemptionInProgressError,
    UnknownCodeTemplateError,
    UsageExceededError,
)
from gacha_arena.economy.locks.keys import account_key, advisory_lock_id, redeem_key
from gacha_arena.economy.redeem.service import RedemptionService
from gacha_arena.economy.rewards.types import Coins, DrawCredits
from tests.economy.economy_fakes import (
    NOW_UTC,
    FakeSession,
    install_accounts,
    install_free_locks,
    make_account,
)

CODE = "WLC-123-ABC"


def _code(**overrides: object) -> RedeemCode:
    values: dict[str, object] = {
        "id": 10,
        "code": CODE,
        "description": "Welcome bonus",
        "rewards": [{"type": "coins", "amount": 1000}, {"type": "gacha_draws", "amount": 2}],
        "max_uses": None,
        "expires_at": None,
        "is_active": True,
        "created_by": "Admin",
        "created_at": NOW_UTC - timedelta(days=1),
        "updated_at": NOW_UTC - timedelta(days=1),
    }
    values.update(overrides)
    return RedeemCode(**values)


def _install_code(
    monkeypatch,
    redeem_code: RedeemCode | None,
    *,
    usage_count: int = 0,
    duplicate: bool = False,
) -> list[CodeUsage]:
    usages: list[CodeUsage] = []

    async def _get_for_update(session, code: str) -> RedeemCode | None:
        if redeem_code is not None and redeem_code.code == code:
            return redeem_code
        return None

    async def _count_usages(session, code_id: int) -> int:
        return usage_count + len(usages)

    async def _create_usage(session, *, usage: CodeUsage) -> CodeUsage:
        if duplicate:
            raise IntegrityError("INSERT INTO code_usages", {}, Exception("duplicate key"))
        usages.append(usage)
        return usage

    monkeypatch.setattr(RedeemCodesRepo, "get_by_code_for_update", _get_for_update)
    monkeypatch.setattr(RedeemCodesRepo, "count_usages", _count_usages)
    monkeypatch.setattr(RedeemCodesRepo, "create_usage", _create_usage)
    return usages


@pytest.mark.asyncio
async def test_redeem_grants_rewards_once(monkeypatch) -> None:
    acquired = install_free_locks(monkeypatch)
    install_accounts(monkeypatch, make_account(1, wallet=100, draw_credits=0))
    usages = _install_code(monkeypatch, _code())
    session = FakeSession()
    service = RedemptionService()

    result = await service.redeem(session, code=" wlc-123-abc ", account_id=1, now_utc=NOW_UTC)

    assert result.code == CODE
    assert result.rewards == [Coins(1000), DrawCredits(2)]
    assert (result.wallet_after, result.draw_credits_after) == (1100, 2)
    assert [(usage.code_id, usage.account_id) for usage in usages] == [(10, 1)]
    assert acquired == [
        advisory_lock_id(redeem_key(CODE)),
        advisory_lock_id(account_key(1)),
    ]
    ledger = [obj for obj in session.added if isinstance(obj, LedgerEntry)]
    assert {entry.reason for entry in ledger} == {"REDEEM"}
    assert len(service.in_flight) == 0


@pytest.mark.asyncio
async def test_redeem_rejects_malformed_code_before_locking(monkeypatch) -> None:
    acquired = install_free_locks(monkeypatch)

    with pytest.raises(InvalidCodeError):
        await RedemptionService().redeem(FakeSession(), code="nope", account_id=1)

    assert acquired == []


@pytest.mark.asyncio
async def test_redeem_unknown_code_is_invalid(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    install_accounts(monkeypatch, make_account(1))
    _install_code(monkeypatch, None)

    with pytest.raises(InvalidCodeError):
        await RedemptionService().redeem(FakeSession(), code=CODE, account_id=1)


@pytest.mark.asyncio
async def test_redeem_inactive_code_is_invalid(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    install_accounts(monkeypatch, make_account(1))
    _install_code(monkeypatch, _code(is_active=False))

    with pytest.raises(InvalidCodeError):
        await RedemptionService().redeem(FakeSession(), code=CODE, account_id=1)


@pytest.mark.asyncio
async def test_redeem_expired_code(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    install_accounts(monkeypatch, make_account(1))
    _install_code(monkeypatch, _code(expires_at=NOW_UTC))

    with pytest.raises(CodeExpiredError):
        await RedemptionService().redeem(FakeSession(), code=CODE, account_id=1, now_utc=NOW_UTC)


@pytest.mark.asyncio
async def test_redeem_naive_expiry_is_treated_as_utc(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    install_accounts(monkeypatch, make_account(1))
    naive_future = (NOW_UTC + timedelta(hours=1)).replace(tzinfo=None)
    _install_code(monkeypatch, _code(expires_at=naive_future))

    result = await RedemptionService().redeem(FakeSession(), code=CODE, account_id=1, now_utc=NOW_UTC)

    assert result.wallet_after == 2000


@pytest.mark.asyncio
async def test_redeem_at_usage_cap_is_rejected(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    install_accounts(monkeypatch, make_account(1))
    _install_code(monkeypatch, _code(max_uses=5), usage_count=5)

    with pytest.raises(UsageExceededError):
        await RedemptionService().redeem(FakeSession(), code=CODE, account_id=1)


@pytest.mark.asyncio
async def test_last_allowed_redemption_keeps_code_active(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    install_accounts(monkeypatch, make_account(1))
    redeem_code = _code(max_uses=5)
    _install_code(monkeypatch, redeem_code, usage_count=4)

    await RedemptionService().redeem(FakeSession(), code=CODE, account_id=1, now_utc=NOW_UTC)

    assert redeem_code.is_active is True
    assert redeem_code.updated_at == NOW_UTC - timedelta(days=1)


@pytest.mark.asyncio
async def test_single_use_code_rejects_second_account_as_exhausted(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    accounts = install_accounts(monkeypatch, make_account(1, wallet=0), make_account(2, wallet=0))
    usages = _install_code(monkeypatch, _code(max_uses=1))
    service = RedemptionService()

    await service.redeem(FakeSession(), code=CODE, account_id=1, now_utc=NOW_UTC)
    with pytest.raises(UsageExceededError):
        await service.redeem(FakeSession(), code=CODE, account_id=2, now_utc=NOW_UTC)

    assert [usage.account_id for usage in usages] == [1]
    assert (accounts[1].wallet, accounts[2].wallet) == (1000, 0)


@pytest.mark.asyncio
async def test_second_redemption_by_same_account_is_rejected(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    accounts = install_accounts(monkeypatch, make_account(1, wallet=100))
    _install_code(monkeypatch, _code(), duplicate=True)

    with pytest.raises(AlreadyRedeemedError):
        await RedemptionService().redeem(FakeSession(), code=CODE, account_id=1)

    assert accounts[1].wallet == 100


@pytest.mark.asyncio
async def test_redeem_for_missing_account(monkeypatch) -> None:
    install_free_locks(monkeypatch)
    install_accounts(monkeypatch)
    _install_code(monkeypatch, _code())

    with pytest.raises(AccountNotFoundError):
        await RedemptionService().redeem(FakeSession(), code=CODE, account_id=404)


@pytest.mark.asyncio
async def test_redeem_while_same_pair_in_flight(monkeypatch) -> None:
    acquired = install_free_locks(monkeypatch)
    service = RedemptionService()

    with service.in_flight.claim(CODE, 1):
        with pytest.raises(RedemptionInProgressError):
            await service.redeem(FakeSession(), code=CODE.lower(), account_id=1)

    assert acquired == []


@pytest.mark.asyncio
async def test_parallel_redeems_for_one_pair_succeed_once(monkeypatch) -> None:
    async def _yielding_lock(session, lock_id: int) -> bool:
        await asyncio.sleep(0)
        return True

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _yielding_lock)
    accounts = install_accounts(monkeypatch, make_account(1, wallet=0))
    usages = _install_code(monkeypatch, _code())
    service = RedemptionService()

    outcomes = await asyncio.gather(
        *(service.redeem(FakeSession(), code=CODE, account_id=1) for _ in range(5)),
        return_exceptions=True,
    )

    failures = [outcome for outcome in outcomes if isinstance(outcome, Exception)]
    assert len(outcomes) - len(failures) == 1
    assert len(failures) == 4
    assert all(isinstance(failure, AlreadyRedeemedError) for failure in failures)
    assert len(usages) == 1
    assert accounts[1].wallet == 1000
    assert len(service.in_flight) == 0


@pytest.mark.asyncio
async def test_issue_from_template_stores_serialized_rewards(monkeypatch) -> None:
    stored: list[RedeemCode] = []

    async def _code_exists(session, code: str) -> bool:
        return False

    async def _create(session, *, redeem_code: RedeemCode) -> RedeemCode:
        redeem_code.id = 77
        stored.append(redeem_code)
        return redeem_code

    monkeypatch.setattr(RedeemCodesRepo, "code_exists", _code_exists)
    monkeypatch.setattr(RedeemCodesRepo, "create", _create)

    issued = await RedemptionService().issue_from_template(
        FakeSession(),
        template_name="welcome",
        now_utc=NOW_UTC,
    )

    assert issued.code_id == 77
    assert issued.max_uses == 100
    assert stored[0].rewards == [
        {"type": "coins", "amount": 1000},
        {"type": "gacha_draws", "amount": 2},
    ]
    assert stored[0].code == issued.code


@pytest.mark.asyncio
async def test_issue_from_unknown_template_fails() -> None:
    with pytest.raises(UnknownCodeTemplateError):
        await RedemptionService().issue_from_template(FakeSession(), template_name="nope")


@pytest.mark.asyncio
async def test_issue_code_gives_up_after_repeated_collisions(monkeypatch) -> None:
    async def _always_taken(session, code: str) -> bool:
        return True

    monkeypatch.setattr(RedeemCodesRepo, "code_exists", _always_taken)

    with pytest.raises(CodeGenerationError):
        await RedemptionService().issue_code(FakeSession(), rewards=[Coins(10)], created_by="ops")


@pytest.mark.asyncio
async def test_sweep_codes_deactivates_expired_only(monkeypatch) -> None:
    async def _expired(session, *, now_utc) -> int:
        return 3

    monkeypatch.setattr(RedeemCodesRepo, "deactivate_expired", _expired)

    result = await RedemptionService.sweep_codes(FakeSession(), now_utc=NOW_UTC)

    assert result.expired == 3
