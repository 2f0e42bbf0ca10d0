from __future__ import annotations

from typing import Any

import bcrypt

# (username, user_id, password, role). Ids own analyses and collections.
_DEMO_ACCOUNTS = (
    ("user", 1, "user123", "user"),
    ("admin", 2, "admin123", "admin"),
    ("barista", 3, "barista123", "user"),
)

_accounts: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _password_matches(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _seed_accounts() -> None:
    for username, user_id, password, role in _DEMO_ACCOUNTS:
        _accounts[username] = {
            "user_id": user_id,
            "password_hash": _hash_password(password),
            "role": role,
        }


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Check a login. Returns the session identity ``{user_id, username, role}`` or ``None``."""
    account = _accounts.get(username)
    if account is None or not _password_matches(password, account["password_hash"]):
        return None
    return {"user_id": account["user_id"], "username": username, "role": account["role"]}


_seed_accounts()
