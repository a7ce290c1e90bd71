from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from gacha_arena.core.config import get_settings
from gacha_arena.db.session import SessionLocal
from gacha_arena.economy.errors import EconomyError
from gacha_arena.economy.ledger.service import LedgerService

from .internal_helpers import assert_internal_access, raise_for_economy_error

router = APIRouter(tags=["internal", "economy"])


class TransferRequest(BaseModel):
    from_account_id: int = Field(gt=0)
    to_account_id: int = Field(gt=0)
    amount: int = Field(gt=0)


class TransferResponse(BaseModel):
    from_account_id: int
    to_account_id: int
    amount: int
    from_wallet_after: int
    to_wallet_after: int


@router.post("/internal/economy/transfer", response_model=TransferResponse)
async def transfer_coins(payload: TransferRequest, request: Request) -> TransferResponse:
    assert_internal_access(request, settings=get_settings())

    try:
        async with SessionLocal.begin() as session:
            result = await LedgerService.transfer(
                session,
                from_account_id=payload.from_account_id,
                to_account_id=payload.to_account_id,
                amount=payload.amount,
            )
    except EconomyError as exc:
        raise_for_economy_error(exc)

    return TransferResponse(
        from_account_id=result.from_account_id,
        to_account_id=result.to_account_id,
        amount=result.amount,
        from_wallet_after=result.from_wallet_after,
        to_wallet_after=result.to_wallet_after,
    )
