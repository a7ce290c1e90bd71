from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

import pytest

from gacha_arena.db.models.accounts import Account
from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.locks_repo import LocksRepo

NOW_UTC = datetime(2026, 9, 1, 12, 0, tzinfo=timezone.utc)


class FakeNested:
    async def __aenter__(self) -> None:
        return None

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class FakeSession:
    def __init__(self) -> None:
        self.added: list[object] = []
        self.flush_calls = 0

    def add(self, obj: object) -> None:
        self.added.append(obj)

    def add_all(self, objects: Iterable[object]) -> None:
        self.added.extend(objects)

    async def flush(self) -> None:
        self.flush_calls += 1

    def begin_nested(self) -> FakeNested:
        return FakeNested()


def make_account(account_id: int, **overrides: object) -> Account:
    values: dict[str, object] = {
        "id": account_id,
        "external_id": f"ext-{account_id}",
        "username": f"player{account_id}",
        "wallet": 1000,
        "bank": 0,
        "draw_credits": 10,
        "equipped_power_id": None,
        "bonus_cp": 0,
        "battles_won": 0,
        "battles_lost": 0,
        "level": 1,
        "pity_counter": 0,
    }
    values.update(overrides)
    return Account(**values)


def install_free_locks(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    acquired: list[int] = []

    async def _try_xact_lock(session, lock_id: int) -> bool:
        acquired.append(lock_id)
        return True

    monkeypatch.setattr(LocksRepo, "try_xact_lock", _try_xact_lock)
    return acquired


def install_accounts(monkeypatch: pytest.MonkeyPatch, *accounts: Account) -> dict[int, Account]:
    by_id = {account.id: account for account in accounts}

    async def _get_by_id_for_update(session, account_id: int) -> Account | None:
        return by_id.get(account_id)

    async def _get_many_for_update(session, account_ids) -> list[Account]:
        return [by_id[account_id] for account_id in sorted(set(account_ids)) if account_id in by_id]

    monkeypatch.setattr(AccountsRepo, "get_by_id_for_update", _get_by_id_for_update)
    monkeypatch.setattr(AccountsRepo, "get_many_for_update", _get_many_for_update)
    return by_id
