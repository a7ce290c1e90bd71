from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from gacha_arena.economy.errors import RedemptionInProgressError


class InFlightRedemptions:
    """Process-local set of (code, account) pairs currently being redeemed.

    Fast-path rejection only. The unique (code, account) constraint in
    ``code_usages`` is what guarantees at-most-once redemption.
    """

    def __init__(self) -> None:
        self._pairs: set[tuple[str, int]] = set()

    def __contains__(self, pair: tuple[str, int]) -> bool:
        return pair in self._pairs

    def __len__(self) -> int:
        return len(self._pairs)

    @contextmanager
    def claim(self, code: str, account_id: int) -> Iterator[None]:
        pair = (code, account_id)
        if pair in self._pairs:
            raise RedemptionInProgressError
        self._pairs.add(pair)
        try:
            yield
        finally:
            self._pairs.discard(pair)

    def reset(self) -> None:
        self._pairs.clear()
