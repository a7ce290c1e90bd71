from __future__ import annotations

from datetime import datetime

from gacha_arena.db.models.ledger_entries import LedgerEntry


def build_entry(
    *,
    account_id: int,
    asset: str,
    direction: str,
    amount: int,
    balance_after: int | None,
    reason: str,
    now_utc: datetime,
    counterparty_account_id: int | None = None,
    metadata: dict[str, object] | None = None,
) -> LedgerEntry:
    return LedgerEntry(
        account_id=account_id,
        counterparty_account_id=counterparty_account_id,
        asset=asset,
        direction=direction,
        amount=amount,
        balance_after=balance_after,
        reason=reason,
        metadata_=metadata or {},
        created_at=now_utc,
    )
