from __future__ import annotations

import pytest

from gacha_arena.db.repo.locks_repo import LocksRepo
from gacha_arena.economy.errors import LockAlreadyHeldError, LockTimeoutError
from gacha_arena.economy.locks.keys import (
    account_key,
    account_pair_key,
    advisory_lock_id,
    redeem_key,
)
from gacha_arena.economy.locks.manager import ResourceLockManager


class _FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _manager(clock: _FakeClock, **kwargs: float) -> ResourceLockManager:
    return ResourceLockManager(clock=clock, sleep=clock.sleep, **kwargs)


def test_lock_keys_are_stable_and_pair_key_is_order_independent() -> None:
    assert account_key(7) == "account:7"
    assert redeem_key("ABC-123-XYZ") == "redeem:ABC-123-XYZ"
    assert account_pair_key(9, 3) == account_pair_key(3, 9) == "accounts:3:9"


def test_advisory_lock_id_is_deterministic_signed_bigint() -> None:
    first = advisory_lock_id("account:1")
    assert first == advisory_lock_id("account:1")
    assert first != advisory_lock_id("account:2")
    assert -(2**63) <= first < 2**63


@pytest.mark.asyncio
async def test_hold_registers_and_releases_key(monkeypatch) -> None:
    async def _granted(session, lock_id: int) -> bool:
        return True

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _granted)
    clock = _FakeClock()
    locks = _manager(clock)
    session = object()

    async with locks.hold(session, "account:1") as handle:
        assert handle.key == "account:1"
        assert handle.lock_id == advisory_lock_id("account:1")
        assert locks.is_held(session, "account:1") is True
        assert locks.is_held(object(), "account:1") is False
        assert locks.held_keys() == ["account:1"]

    assert locks.is_held(session, "account:1") is False
    assert locks.held_keys() == []


@pytest.mark.asyncio
async def test_hold_releases_bookkeeping_when_body_raises(monkeypatch) -> None:
    async def _granted(session, lock_id: int) -> bool:
        return True

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _granted)
    locks = _manager(_FakeClock())
    session = object()

    with pytest.raises(RuntimeError):
        async with locks.hold(session, "account:1"):
            raise RuntimeError("boom")

    assert locks.is_held(session, "account:1") is False


@pytest.mark.asyncio
async def test_reacquiring_held_key_in_same_session_is_rejected(monkeypatch) -> None:
    async def _granted(session, lock_id: int) -> bool:
        return True

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _granted)
    locks = _manager(_FakeClock())
    session = object()

    async with locks.hold(session, "redeem:AAA-BBB-CCC"):
        with pytest.raises(LockAlreadyHeldError):
            await locks.acquire(session, "redeem:AAA-BBB-CCC")


@pytest.mark.asyncio
async def test_acquire_polls_with_backoff_until_granted(monkeypatch) -> None:
    answers = iter([False, False, False, True])

    async def _contended(session, lock_id: int) -> bool:
        return next(answers)

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _contended)
    clock = _FakeClock()
    locks = _manager(clock)

    handle = await locks.acquire(object(), "account:5")

    assert handle.key == "account:5"
    assert clock.sleeps == [0.01, 0.02, 0.04]


@pytest.mark.asyncio
async def test_acquire_times_out_when_key_never_frees(monkeypatch) -> None:
    async def _never(session, lock_id: int) -> bool:
        return False

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _never)
    clock = _FakeClock()
    locks = _manager(clock, timeout_seconds=1.0)
    session = object()

    with pytest.raises(LockTimeoutError) as exc_info:
        await locks.acquire(session, "account:5")

    assert exc_info.value.key == "account:5"
    assert exc_info.value.retryable is True
    assert max(clock.sleeps) == 0.25
    assert clock.now == pytest.approx(101.0)
    assert locks.is_held(session, "account:5") is False


@pytest.mark.asyncio
async def test_acquire_honours_per_call_timeout(monkeypatch) -> None:
    async def _never(session, lock_id: int) -> bool:
        return False

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _never)
    clock = _FakeClock()
    locks = _manager(clock, timeout_seconds=30.0)

    with pytest.raises(LockTimeoutError):
        await locks.acquire(object(), "account:5", timeout=0.05)

    assert clock.now == pytest.approx(100.05)


@pytest.mark.asyncio
async def test_sweep_drops_handles_older_than_ceiling(monkeypatch) -> None:
    async def _granted(session, lock_id: int) -> bool:
        return True

    async def _terminate(session, *, ceiling_seconds: float) -> int:
        assert ceiling_seconds == 60.0
        return 2

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _granted)
    monkeypatch.setattr(LocksRepo, "terminate_stale_holders", _terminate)
    clock = _FakeClock()
    locks = _manager(clock, hard_ceiling_seconds=60.0)
    session = object()

    await locks.acquire(session, "account:1")
    clock.now += 120.0
    await locks.acquire(session, "account:2")

    result = await locks.sweep_stale_holders(session)

    assert result.terminated_backends == 2
    assert result.dropped_handles == 1
    assert locks.held_keys() == ["account:2"]
