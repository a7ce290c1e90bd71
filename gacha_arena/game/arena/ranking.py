from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RankingCandidate:
    account_id: int
    effective_cp: int
    battles_won: int
    level: int


@dataclass(frozen=True, slots=True)
class RankedEntry:
    account_id: int
    position: int
    total_cp: int


def ranking_sort_key(candidate: RankingCandidate) -> tuple[int, int, int, int]:
    return (
        -candidate.effective_cp,
        -candidate.battles_won,
        -candidate.level,
        candidate.account_id,
    )


def assign_positions(candidates: Iterable[RankingCandidate]) -> list[RankedEntry]:
    ordered = sorted(candidates, key=ranking_sort_key)
    return [
        RankedEntry(
            account_id=candidate.account_id,
            position=position,
            total_cp=candidate.effective_cp,
        )
        for position, candidate in enumerate(ordered, start=1)
    ]
