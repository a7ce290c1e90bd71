from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from gacha_arena.db.models.base import Base

POWER_RANK_LABELS_SQL = (
    "'Normal','Rare','Epic','Legendary','Mythic',"
    "'Divine','Cosmic','Transcendent','Omnipotent','Absolute'"
)


class PowerDefinition(Base):
    __tablename__ = "power_definitions"
    __table_args__ = (
        CheckConstraint(f"rank IN ({POWER_RANK_LABELS_SQL})", name="ck_power_definitions_rank"),
        CheckConstraint("base_cp > 0", name="ck_power_definitions_base_cp_positive"),
        CheckConstraint("base_price >= 0", name="ck_power_definitions_base_price_non_negative"),
        UniqueConstraint("name", name="uq_power_definitions_name"),
        Index("idx_power_definitions_rank", "rank"),
        Index("idx_power_definitions_base_cp", "base_cp"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    rank: Mapped[str] = mapped_column(String(16), nullable=False)
    base_cp: Mapped[int] = mapped_column(Integer, nullable=False)
    base_price: Mapped[int] = mapped_column(Integer, nullable=False)


class PowerInstance(Base):
    __tablename__ = "power_instances"
    __table_args__ = (
        CheckConstraint("combat_power >= 0", name="ck_power_instances_combat_power_non_negative"),
        CheckConstraint(
            "source IN ('DRAW','REDEEM','GRANT')",
            name="ck_power_instances_source",
        ),
        Index("idx_power_instances_account", "account_id"),
        Index("idx_power_instances_definition", "power_definition_id"),
        Index("idx_power_instances_combat_power", "combat_power"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    account_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    power_definition_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("power_definitions.id"),
        nullable=False,
    )
    combat_power: Mapped[int] = mapped_column(Integer, nullable=False)
    rank: Mapped[str] = mapped_column(String(16), nullable=False)
    source: Mapped[str] = mapped_column(String(16), nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
