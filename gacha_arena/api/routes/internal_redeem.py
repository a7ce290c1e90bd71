from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from gacha_arena.core.config import get_settings
from gacha_arena.db.session import SessionLocal
from gacha_arena.economy.errors import EconomyError
from gacha_arena.economy.redeem.service import redemption_service
from gacha_arena.economy.redeem.types import RedeemResult
from gacha_arena.economy.rewards.types import serialize_reward

from .internal_helpers import assert_internal_access, raise_for_economy_error

router = APIRouter(tags=["internal", "redeem"])


class RedeemRequest(BaseModel):
    account_id: int = Field(gt=0)
    code: str = Field(min_length=1, max_length=32)


class RedeemResponse(BaseModel):
    code: str
    description: str
    rewards: list[dict[str, object]]
    wallet_after: int
    draw_credits_after: int
    power_instance_ids: list[int]


def _as_response(result: RedeemResult) -> RedeemResponse:
    return RedeemResponse(
        code=result.code,
        description=result.description,
        rewards=[serialize_reward(reward) for reward in result.rewards],
        wallet_after=result.wallet_after,
        draw_credits_after=result.draw_credits_after,
        power_instance_ids=list(result.power_instance_ids),
    )


@router.post("/internal/redeem", response_model=RedeemResponse)
async def redeem_code(payload: RedeemRequest, request: Request) -> RedeemResponse:
    assert_internal_access(request, settings=get_settings())

    try:
        async with SessionLocal.begin() as session:
            result = await redemption_service.redeem(
                session,
                code=payload.code,
                account_id=payload.account_id,
            )
    except EconomyError as exc:
        raise_for_economy_error(exc)

    return _as_response(result)
