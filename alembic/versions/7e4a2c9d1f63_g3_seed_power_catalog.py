"""g3_seed_power_catalog

Revision ID: 7e4a2c9d1f63
Revises: 5d2f0b8c6e41
Create Date: 2026-09-02 10:05:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "7e4a2c9d1f63"
down_revision: str | None = "5d2f0b8c6e41"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

# Starter pool for every drawable rank; base_price is 10x base_cp.
SEED_POWERS: tuple[tuple[str, str, str, int], ...] = (
    ("Basic Combat Training", "Foundation of all military combat", "Normal", 45),
    ("Vertical Maneuvering Equipment", "Standard ODM gear for mobility", "Normal", 50),
    ("Thunder Spear", "Explosive spear for titan combat", "Normal", 60),
    ("Enhanced Strength", "Superhuman physical capabilities", "Rare", 250),
    ("Steam Release", "Release scalding steam defense", "Rare", 230),
    ("Titan Hardening", "Harden skin for defense and offense", "Rare", 280),
    ("Armored Titan Power", "Massive armored defensive form", "Epic", 950),
    ("Colossal Titan Power", "Enormous size with steam attacks", "Epic", 1100),
    ("Female Titan Power", "Agile form with hardening", "Epic", 900),
    ("Attack Titan Power", "Attack Titan with future memories", "Legendary", 2200),
    ("Warhammer Titan Power", "Create weapons and structures", "Legendary", 2300),
    ("Jaw Titan Elite", "Enhanced Jaw Titan capabilities", "Legendary", 2100),
    ("Founding Titan Power", "Ultimate titan control coordinate", "Mythic", 5500),
    ("Ackerman Bloodline", "Awakened superhuman Ackerman powers", "Mythic", 5200),
    ("Royal Blood", "Royal Fritz commanding authority", "Mythic", 5000),
)

power_definitions = sa.table(
    "power_definitions",
    sa.column("name", sa.String),
    sa.column("description", sa.Text),
    sa.column("rank", sa.String),
    sa.column("base_cp", sa.Integer),
    sa.column("base_price", sa.Integer),
)


def upgrade() -> None:
    op.bulk_insert(
        power_definitions,
        [
            {
                "name": name,
                "description": description,
                "rank": rank,
                "base_cp": base_cp,
                "base_price": base_cp * 10,
            }
            for name, description, rank, base_cp in SEED_POWERS
        ],
    )


def downgrade() -> None:
    op.execute(
        sa.delete(power_definitions).where(
            power_definitions.c.name.in_([name for name, _, _, _ in SEED_POWERS])
        )
    )
