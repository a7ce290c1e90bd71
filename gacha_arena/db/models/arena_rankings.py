from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from gacha_arena.db.models.base import Base


class ArenaRanking(Base):
    __tablename__ = "arena_rankings"
    __table_args__ = (
        CheckConstraint("rank_position >= 1", name="ck_arena_rankings_position_positive"),
        CheckConstraint("total_cp >= 0", name="ck_arena_rankings_total_cp_non_negative"),
        UniqueConstraint("rank_position", name="uq_arena_rankings_rank_position"),
        Index("idx_arena_rankings_total_cp", "total_cp"),
    )

    account_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    rank_position: Mapped[int] = mapped_column(Integer, nullable=False)
    total_cp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
