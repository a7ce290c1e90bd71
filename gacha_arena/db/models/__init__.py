from gacha_arena.db.models.accounts import Account
from gacha_arena.db.models.arena_rankings import ArenaRanking
from gacha_arena.db.models.base import Base
from gacha_arena.db.models.ledger_entries import LedgerEntry
from gacha_arena.db.models.powers import PowerDefinition, PowerInstance
from gacha_arena.db.models.redeem_codes import CodeUsage, RedeemCode

__all__ = [
    "Account",
    "ArenaRanking",
    "Base",
    "CodeUsage",
    "LedgerEntry",
    "PowerDefinition",
    "PowerInstance",
    "RedeemCode",
]
