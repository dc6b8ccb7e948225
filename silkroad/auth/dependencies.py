from __future__ import annotations

from fastapi import HTTPException, Request


def require_user(request: Request) -> dict:
    """Raise 401 if nobody is logged in."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(request: Request) -> dict:
    """Raise 401 if not logged in, 403 if the account cannot manage the catalog."""
    user = require_user(request)
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
