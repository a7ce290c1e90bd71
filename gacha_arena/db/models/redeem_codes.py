from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BOOLEAN,
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
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from gacha_arena.db.models.base import Base


class RedeemCode(Base):
    __tablename__ = "redeem_codes"
    __table_args__ = (
        CheckConstraint(
            "code ~ '^[A-Z0-9]{3}-[A-Z0-9]{3}-[A-Z0-9]{3}$'",
            name="ck_redeem_codes_format",
        ),
        CheckConstraint(
            "max_uses IS NULL OR max_uses > 0",
            name="ck_redeem_codes_max_uses_positive",
        ),
        UniqueConstraint("code", name="uq_redeem_codes_code"),
        Index("idx_redeem_codes_active", "is_active"),
        Index("idx_redeem_codes_expires_at", "expires_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    code: Mapped[str] = mapped_column(String(11), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    rewards: Mapped[list[dict[str, object]]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'[]'::jsonb"),
    )
    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class CodeUsage(Base):
    __tablename__ = "code_usages"
    __table_args__ = (
        UniqueConstraint("code_id", "account_id", name="uq_code_usages_code_account"),
        Index("idx_code_usages_account", "account_id"),
        Index("idx_code_usages_redeemed_at", "redeemed_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    code_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("redeem_codes.id", ondelete="CASCADE"),
        nullable=False,
    )
    account_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    redeemed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
