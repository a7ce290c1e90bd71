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
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from gacha_arena.db.models.base import Base


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("wallet >= 0", name="ck_accounts_wallet_non_negative"),
        CheckConstraint("bank >= 0", name="ck_accounts_bank_non_negative"),
        CheckConstraint("draw_credits >= 0", name="ck_accounts_draw_credits_non_negative"),
        CheckConstraint("bonus_cp >= 0", name="ck_accounts_bonus_cp_non_negative"),
        CheckConstraint("battles_won >= 0", name="ck_accounts_battles_won_non_negative"),
        CheckConstraint("battles_lost >= 0", name="ck_accounts_battles_lost_non_negative"),
        CheckConstraint("level >= 1", name="ck_accounts_level_positive"),
        CheckConstraint("pity_counter >= 0", name="ck_accounts_pity_counter_non_negative"),
        UniqueConstraint("external_id", name="uq_accounts_external_id"),
        Index("idx_accounts_username", "username"),
        Index("idx_accounts_equipped_power", "equipped_power_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    external_id: Mapped[str] = mapped_column(String(32), nullable=False)
    username: Mapped[str] = mapped_column(String(32), nullable=False)
    wallet: Mapped[int] = mapped_column(BigInteger, nullable=False, server_default=text("1000"))
    bank: Mapped[int] = mapped_column(BigInteger, nullable=False, server_default=text("0"))
    draw_credits: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("10"))
    # use_alter: power_instances also references accounts.
    equipped_power_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey(
            "power_instances.id",
            use_alter=True,
            ondelete="SET NULL",
            name="fk_accounts_equipped_power_id",
        ),
        nullable=True,
    )
    bonus_cp: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    battles_won: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    battles_lost: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    level: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    pity_counter: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
