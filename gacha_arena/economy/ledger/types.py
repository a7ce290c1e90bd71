from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Literal

ALL: Final = "ALL"
AmountOrAll = int | Literal["ALL"]


@dataclass(slots=True)
class TransferResult:
    from_account_id: int
    to_account_id: int
    amount: int
    from_wallet_after: int
    to_wallet_after: int


@dataclass(slots=True)
class WagerResult:
    account_id: int
    stake: int
    payout: int
    net: int
    wallet_after: int


@dataclass(slots=True)
class BankMoveResult:
    account_id: int
    amount: int
    wallet_after: int
    bank_after: int


@dataclass(slots=True)
class GrantResult:
    account_id: int
    coins: int = 0
    draw_credits: int = 0
    power_instance_ids: list[int] = field(default_factory=list)
    wallet_after: int = 0
    draw_credits_after: int = 0


@dataclass(slots=True)
class PurchaseDrawsResult:
    account_id: int
    count: int
    cost: int
    wallet_after: int
    draw_credits_after: int
