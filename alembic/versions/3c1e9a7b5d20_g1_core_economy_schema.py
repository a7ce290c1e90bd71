"""g1_core_economy_schema

Revision ID: 3c1e9a7b5d20
Revises:
Create Date: 2026-09-02 09:30:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3c1e9a7b5d20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

POWER_RANKS_SQL = (
    "'Normal','Rare','Epic','Legendary','Mythic',"
    "'Divine','Cosmic','Transcendent','Omnipotent','Absolute'"
)


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("external_id", sa.String(32), nullable=False),
        sa.Column("username", sa.String(32), nullable=False),
        sa.Column("wallet", sa.BigInteger(), nullable=False, server_default=sa.text("1000")),
        sa.Column("bank", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column("draw_credits", sa.Integer(), nullable=False, server_default=sa.text("10")),
        sa.Column("equipped_power_id", sa.BigInteger(), nullable=True),
        sa.Column("bonus_cp", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("battles_won", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("battles_lost", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("level", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("pity_counter", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("wallet >= 0", name="ck_accounts_wallet_non_negative"),
        sa.CheckConstraint("bank >= 0", name="ck_accounts_bank_non_negative"),
        sa.CheckConstraint("draw_credits >= 0", name="ck_accounts_draw_credits_non_negative"),
        sa.CheckConstraint("bonus_cp >= 0", name="ck_accounts_bonus_cp_non_negative"),
        sa.CheckConstraint("battles_won >= 0", name="ck_accounts_battles_won_non_negative"),
        sa.CheckConstraint("battles_lost >= 0", name="ck_accounts_battles_lost_non_negative"),
        sa.CheckConstraint("level >= 1", name="ck_accounts_level_positive"),
        sa.CheckConstraint("pity_counter >= 0", name="ck_accounts_pity_counter_non_negative"),
        sa.UniqueConstraint("external_id", name="uq_accounts_external_id"),
    )
    op.create_index("idx_accounts_username", "accounts", ["username"])
    op.create_index("idx_accounts_equipped_power", "accounts", ["equipped_power_id"])

    op.create_table(
        "power_definitions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("rank", sa.String(16), nullable=False),
        sa.Column("base_cp", sa.Integer(), nullable=False),
        sa.Column("base_price", sa.Integer(), nullable=False),
        sa.CheckConstraint(f"rank IN ({POWER_RANKS_SQL})", name="ck_power_definitions_rank"),
        sa.CheckConstraint("base_cp > 0", name="ck_power_definitions_base_cp_positive"),
        sa.CheckConstraint("base_price >= 0", name="ck_power_definitions_base_price_non_negative"),
        sa.UniqueConstraint("name", name="uq_power_definitions_name"),
    )
    op.create_index("idx_power_definitions_rank", "power_definitions", ["rank"])
    op.create_index("idx_power_definitions_base_cp", "power_definitions", ["base_cp"])

    op.create_table(
        "power_instances",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("account_id", sa.BigInteger(), nullable=False),
        sa.Column("power_definition_id", sa.BigInteger(), nullable=False),
        sa.Column("combat_power", sa.Integer(), nullable=False),
        sa.Column("rank", sa.String(16), nullable=False),
        sa.Column("source", sa.String(16), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("combat_power >= 0", name="ck_power_instances_combat_power_non_negative"),
        sa.CheckConstraint("source IN ('DRAW','REDEEM','GRANT')", name="ck_power_instances_source"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["power_definition_id"], ["power_definitions.id"]),
    )
    op.create_index("idx_power_instances_account", "power_instances", ["account_id"])
    op.create_index("idx_power_instances_definition", "power_instances", ["power_definition_id"])
    op.create_index("idx_power_instances_combat_power", "power_instances", ["combat_power"])

    op.create_foreign_key(
        "fk_accounts_equipped_power_id",
        "accounts",
        "power_instances",
        ["equipped_power_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "redeem_codes",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("code", sa.String(11), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "rewards",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("code ~ '^[A-Z0-9]{3}-[A-Z0-9]{3}-[A-Z0-9]{3}$'", name="ck_redeem_codes_format"),
        sa.CheckConstraint("max_uses IS NULL OR max_uses > 0", name="ck_redeem_codes_max_uses_positive"),
        sa.UniqueConstraint("code", name="uq_redeem_codes_code"),
    )
    op.create_index("idx_redeem_codes_active", "redeem_codes", ["is_active"])
    op.create_index("idx_redeem_codes_expires_at", "redeem_codes", ["expires_at"])

    op.create_table(
        "code_usages",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("code_id", sa.BigInteger(), nullable=False),
        sa.Column("account_id", sa.BigInteger(), nullable=False),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["code_id"], ["redeem_codes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("code_id", "account_id", name="uq_code_usages_code_account"),
    )
    op.create_index("idx_code_usages_account", "code_usages", ["account_id"])
    op.create_index("idx_code_usages_redeemed_at", "code_usages", ["redeemed_at"])

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("account_id", sa.BigInteger(), nullable=False),
        sa.Column("counterparty_account_id", sa.BigInteger(), nullable=True),
        sa.Column("asset", sa.String(16), nullable=False),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("balance_after", sa.BigInteger(), nullable=True),
        sa.Column("reason", sa.String(32), nullable=False),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_ledger_entries_amount_positive"),
        sa.CheckConstraint(
            "asset IN ('WALLET','BANK','DRAW_CREDITS','POWER')",
            name="ck_ledger_entries_asset",
        ),
        sa.CheckConstraint("direction IN ('CREDIT','DEBIT')", name="ck_ledger_entries_direction"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["counterparty_account_id"], ["accounts.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_ledger_entries_account_created", "ledger_entries", ["account_id", "created_at"])
    op.create_index("idx_ledger_entries_reason", "ledger_entries", ["reason"])

    op.create_table(
        "arena_rankings",
        sa.Column("account_id", sa.BigInteger(), nullable=False),
        sa.Column("rank_position", sa.Integer(), nullable=False),
        sa.Column("total_cp", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("rank_position >= 1", name="ck_arena_rankings_position_positive"),
        sa.CheckConstraint("total_cp >= 0", name="ck_arena_rankings_total_cp_non_negative"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("account_id"),
        sa.UniqueConstraint("rank_position", name="uq_arena_rankings_rank_position"),
    )
    op.create_index("idx_arena_rankings_total_cp", "arena_rankings", ["total_cp"])


def downgrade() -> None:
    op.drop_index("idx_arena_rankings_total_cp", table_name="arena_rankings")
    op.drop_table("arena_rankings")

    op.drop_index("idx_ledger_entries_reason", table_name="ledger_entries")
    op.drop_index("idx_ledger_entries_account_created", table_name="ledger_entries")
    op.drop_table("ledger_entries")

    op.drop_index("idx_code_usages_redeemed_at", table_name="code_usages")
    op.drop_index("idx_code_usages_account", table_name="code_usages")
    op.drop_table("code_usages")

    op.drop_index("idx_redeem_codes_expires_at", table_name="redeem_codes")
    op.drop_index("idx_redeem_codes_active", table_name="redeem_codes")
    op.drop_table("redeem_codes")

    op.drop_constraint("fk_accounts_equipped_power_id", "accounts", type_="foreignkey")

    op.drop_index("idx_power_instances_combat_power", table_name="power_instances")
    op.drop_index("idx_power_instances_definition", table_name="power_instances")
    op.drop_index("idx_power_instances_account", table_name="power_instances")
    op.drop_table("power_instances")

    op.drop_index("idx_power_definitions_base_cp", table_name="power_definitions")
    op.drop_index("idx_power_definitions_rank", table_name="power_definitions")
    op.drop_table("power_definitions")

    op.drop_index("idx_accounts_equipped_power", table_name="accounts")
    op.drop_index("idx_accounts_username", table_name="accounts")
    op.drop_table("accounts")
