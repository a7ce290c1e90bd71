from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class ArenaRecomputeResult:
    ranked_accounts: int
    recomputed_at: datetime


@dataclass(slots=True)
class LeaderboardRow:
    position: int
    account_id: int
    total_cp: int
