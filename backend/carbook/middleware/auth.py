# backend/carbook/middleware/auth.py
"""
Caller identity.

Authentication happens upstream (gateway / session layer). Requests reach the
backend with the verified user id in X-User-Id; this module only normalizes it.
"""

from fastapi import Header, HTTPException


def get_actor_id(x_user_id: str | None = Header(None)) -> str:
    """FastAPI dependency: the acting user's opaque id."""
    actor_id = (x_user_id or "").strip()
    if not actor_id:
        raise HTTPException(401, "Missing X-User-Id")
    return actor_id
