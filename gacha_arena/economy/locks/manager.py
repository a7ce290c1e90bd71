from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import lru_cache

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from gacha_arena.core.config import get_settings
from gacha_arena.db.repo.locks_repo import LocksRepo
from gacha_arena.economy.errors import LockAlreadyHeldError, LockTimeoutError
from gacha_arena.economy.locks.keys import advisory_lock_id

logger = structlog.get_logger(__name__)

POLL_INITIAL_DELAY_SECONDS = 0.01
POLL_MAX_DELAY_SECONDS = 0.25


@dataclass(slots=True)
class LockHandle:
    key: str
    lock_id: int
    session_token: int
    acquired_at: float


@dataclass(slots=True)
class LockSweepResult:
    terminated_backends: int
    dropped_handles: int


class ResourceLockManager:
    """Named mutual exclusion over PostgreSQL transaction-scoped advisory locks.

    The database drops the lock when the owning transaction commits or rolls
    back, so a crashed caller cannot leave a key held. ``release`` only clears
    the in-process bookkeeping used by ``is_held`` and the stale sweep.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 30.0,
        hard_ceiling_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.hard_ceiling_seconds = hard_ceiling_seconds
        self._clock = clock
        self._sleep = sleep
        self._held: dict[tuple[int, str], LockHandle] = {}

    def is_held(self, session: AsyncSession, key: str) -> bool:
        return (id(session), key) in self._held

    def held_keys(self) -> list[str]:
        return sorted(handle.key for handle in self._held.values())

    async def acquire(
        self,
        session: AsyncSession,
        key: str,
        *,
        timeout: float | None = None,
    ) -> LockHandle:
        registry_key = (id(session), key)
        if registry_key in self._held:
            raise LockAlreadyHeldError(key)

        timeout_seconds = self.timeout_seconds if timeout is None else timeout
        lock_id = advisory_lock_id(key)
        started_at = self._clock()
        deadline = started_at + timeout_seconds
        delay = POLL_INITIAL_DELAY_SECONDS
        attempts = 0

        while True:
            attempts += 1
            if await LocksRepo.try_xact_lock(session, lock_id):
                break
            remaining = deadline - self._clock()
            if remaining <= 0:
                logger.warning(
                    "lock_acquire_timeout",
                    key=key,
                    timeout_seconds=timeout_seconds,
                    attempts=attempts,
                )
                raise LockTimeoutError(key, timeout_seconds)
            await self._sleep(min(delay, remaining))
            delay = min(delay * 2, POLL_MAX_DELAY_SECONDS)

        acquired_at = self._clock()
        handle = LockHandle(
            key=key,
            lock_id=lock_id,
            session_token=id(session),
            acquired_at=acquired_at,
        )
        self._held[registry_key] = handle
        if attempts > 1:
            logger.info(
                "lock_acquired_after_wait",
                key=key,
                attempts=attempts,
                waited_ms=int((acquired_at - started_at) * 1000),
            )
        return handle

    def release(self, handle: LockHandle) -> None:
        self._held.pop((handle.session_token, handle.key), None)

    @asynccontextmanager
    async def hold(
        self,
        session: AsyncSession,
        key: str,
        *,
        timeout: float | None = None,
    ) -> AsyncIterator[LockHandle]:
        handle = await self.acquire(session, key, timeout=timeout)
        try:
            yield handle
        finally:
            self.release(handle)

    async def sweep_stale_holders(self, session: AsyncSession) -> LockSweepResult:
        terminated = await LocksRepo.terminate_stale_holders(
            session,
            ceiling_seconds=self.hard_ceiling_seconds,
        )
        cutoff = self._clock() - self.hard_ceiling_seconds
        stale = [
            registry_key
            for registry_key, handle in self._held.items()
            if handle.acquired_at < cutoff
        ]
        for registry_key in stale:
            handle = self._held.pop(registry_key)
            logger.warning(
                "lock_handle_dropped_stale",
                key=handle.key,
                held_seconds=int(self._clock() - handle.acquired_at),
            )
        return LockSweepResult(terminated_backends=terminated, dropped_handles=len(stale))

    def reset(self) -> None:
        self._held.clear()


@lru_cache(maxsize=1)
def get_lock_manager() -> ResourceLockManager:
    settings = get_settings()
    return ResourceLockManager(
        timeout_seconds=settings.lock_timeout_seconds,
        hard_ceiling_seconds=settings.lock_hard_ceiling_seconds,
    )
