from __future__ import annotations

from typing import Any, NoReturn

import structlog
from fastapi import HTTPException, Request

from gacha_arena.economy.errors import (
    AlreadyRedeemedError,
    CodeExpiredError,
    EconomyError,
    InvalidCodeError,
    LockTimeoutError,
    NotFoundError,
    RedemptionInProgressError,
    UsageExceededError,
)
from gacha_arena.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[EconomyError], int], ...] = (
    (NotFoundError, 404),
    (InvalidCodeError, 404),
    (CodeExpiredError, 410),
    (RedemptionInProgressError, 429),
    (AlreadyRedeemedError, 409),
    (UsageExceededError, 409),
    (LockTimeoutError, 423),
)


def assert_internal_access(request: Request, *, settings: Any) -> None:
    client_ip = extract_client_ip(
        request,
        trusted_proxies=getattr(settings, "internal_api_trusted_proxies", ""),
    )
    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_api_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(request, expected_token=settings.internal_api_token):
        logger.warning("internal_api_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


def status_for_error(exc: EconomyError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 422


def raise_for_economy_error(exc: EconomyError) -> NoReturn:
    raise HTTPException(
        status_code=status_for_error(exc),
        detail={"code": exc.code, "message": exc.message},
    ) from exc
