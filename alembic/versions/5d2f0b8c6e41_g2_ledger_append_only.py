"""g2_ledger_append_only

Revision ID: 5d2f0b8c6e41
Revises: 3c1e9a7b5d20
Create Date: 2026-09-02 09:45:00.000000
"""

from collections.abc import Sequence

from alembic import op

revision: str = "5d2f0b8c6e41"
down_revision: str | None = "3c1e9a7b5d20"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.execute(
        """
        CREATE OR REPLACE FUNCTION fn_ledger_entries_append_only()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
            RAISE EXCEPTION 'ledger_entries is append-only';
        END;
        $$;
        """
    )
    op.execute(
        """
        CREATE TRIGGER trg_ledger_entries_append_only
        BEFORE UPDATE OR DELETE ON ledger_entries
        FOR EACH ROW
        EXECUTE FUNCTION fn_ledger_entries_append_only();
        """
    )


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS trg_ledger_entries_append_only ON ledger_entries;")
    op.execute("DROP FUNCTION IF EXISTS fn_ledger_entries_append_only();")
