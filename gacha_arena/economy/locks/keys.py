from __future__ import annotations

import hashlib

ARENA_RANKING_KEY = "arena:ranking"


def account_key(account_id: int) -> str:
    return f"account:{account_id}"


def account_pair_key(first_account_id: int, second_account_id: int) -> str:
    low, high = sorted((first_account_id, second_account_id))
    return f"accounts:{low}:{high}"


def redeem_key(code: str) -> str:
    return f"redeem:{code}"


def advisory_lock_id(key: str) -> int:
    digest = hashlib.blake2b(key.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, byteorder="big", signed=True)
