from gacha_arena.db.repo.accounts_repo import AccountsRepo
from gacha_arena.db.repo.arena_repo import ArenaRepo
from gacha_arena.db.repo.ledger_repo import LedgerRepo
from gacha_arena.db.repo.locks_repo import LocksRepo
from gacha_arena.db.repo.powers_repo import PowersRepo
from gacha_arena.db.repo.redeem_codes_repo import RedeemCodesRepo

__all__ = [
    "AccountsRepo",
    "ArenaRepo",
    "LedgerRepo",
    "LocksRepo",
    "PowersRepo",
    "RedeemCodesRepo",
]
