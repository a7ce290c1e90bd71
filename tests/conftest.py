from __future__ import annotations

import pytest

from gacha_arena.economy.locks.manager import get_lock_manager
from gacha_arena.economy.redeem.service import redemption_service


@pytest.fixture(autouse=True)
def reset_process_local_state() -> None:
    yield
    get_lock_manager().reset()
    redemption_service.in_flight.reset()
