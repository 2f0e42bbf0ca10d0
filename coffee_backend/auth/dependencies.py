from __future__ import annotations

from fastapi import Depends, HTTPException, Request


def get_current_user(request: Request) -> dict | None:
    """Return the user dict from the session, or ``None`` for anonymous callers."""
    return request.session.get("user")


def require_user(request: Request) -> dict:
    """Raise 401 if no user is logged in."""
    user = get_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(user: dict = Depends(require_user)) -> dict:
    """Raise 403 unless the logged-in user is an admin."""
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def optional_user_id(user: dict | None = Depends(get_current_user)) -> int | None:
    """Owner id for analyses; anonymous callers get ``None``."""
    return user["user_id"] if user else None


def require_user_id(user: dict = Depends(require_user)) -> int:
    return user["user_id"]
