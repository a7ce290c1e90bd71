from __future__ import annotations


class EconomyError(Exception):
    code = "E_ECONOMY"
    message = "The operation could not be completed."
    retryable = False


class InvalidAmountError(EconomyError):
    code = "E_INVALID_AMOUNT"
    message = "Amount must be a positive whole number."


class InsufficientFundsError(EconomyError):
    code = "E_INSUFFICIENT_FUNDS"
    message = "You do not have enough coins for this."


class NegativeBalanceError(EconomyError):
    code = "E_NEGATIVE_BALANCE"
    message = "This would leave your balance below zero."


class NotFoundError(EconomyError):
    code = "E_NOT_FOUND"
    message = "The requested record does not exist."


class AccountNotFoundError(NotFoundError):
    code = "E_ACCOUNT_NOT_FOUND"
    message = "No account is registered for this user."


class PowerNotFoundError(NotFoundError):
    code = "E_POWER_NOT_FOUND"
    message = "You do not own that power."


class NoPowerEquippedError(EconomyError):
    code = "E_NO_POWER_EQUIPPED"
    message = "Equip a power before doing this."


class NoDrawCreditsError(EconomyError):
    code = "E_NO_DRAW_CREDITS"
    message = "You have no draw credits left."


class InvalidCodeError(EconomyError):
    code = "E_REDEEM_INVALID"
    message = "This code does not exist or is no longer active."


class CodeExpiredError(EconomyError):
    code = "E_REDEEM_EXPIRED"
    message = "This code has expired."


class UsageExceededError(EconomyError):
    code = "E_REDEEM_USAGE_EXCEEDED"
    message = "This code has reached its usage limit."


class AlreadyRedeemedError(EconomyError):
    code = "E_REDEEM_ALREADY_USED"
    message = "You have already redeemed this code."


class RedemptionInProgressError(AlreadyRedeemedError):
    code = "E_REDEEM_IN_PROGRESS"
    message = "This code is already being redeemed for you. Please wait."
    retryable = True


class UnknownCodeTemplateError(EconomyError):
    code = "E_REDEEM_UNKNOWN_TEMPLATE"
    message = "No code template with that name exists."


class CodeGenerationError(EconomyError):
    code = "E_REDEEM_CODE_GENERATION"
    message = "Could not generate a unique code."


class LockTimeoutError(EconomyError):
    code = "E_LOCK_TIMEOUT"
    message = "The system is busy. Please try again in a moment."
    retryable = True

    def __init__(self, key: str, timeout_seconds: float) -> None:
        super().__init__(f"lock {key!r} not acquired within {timeout_seconds:.1f}s")
        self.key = key
        self.timeout_seconds = timeout_seconds


class LockAlreadyHeldError(EconomyError):
    code = "E_LOCK_ALREADY_HELD"

    def __init__(self, key: str) -> None:
        super().__init__(f"lock {key!r} is already held by this transaction")
        self.key = key


def describe_failure(exc: BaseException) -> tuple[str, str]:
    """Map a domain error to its (code, user message) pair."""
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None)
    if isinstance(code, str) and isinstance(message, str):
        return code, message
    return EconomyError.code, EconomyError.message
