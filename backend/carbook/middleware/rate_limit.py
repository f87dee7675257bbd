# backend/carbook/middleware/rate_limit.py
"""
Rate limiting backed by Redis TTL counters.

Counters live in Redis, not in process memory, so every replica of the
backend sees the same count.

Limits:
- By IP (every request except health checks)
- By customer identity (booking submissions)
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from redis import Redis

from ..redis_client import get_redis, redis_client
from ..utils.hashing import hash_identity

logger = logging.getLogger(__name__)


# ============================================================
# RATE LIMIT CONFIGURATION
# ============================================================

RATE_LIMITS = {
    # Any client, by source IP
    "public": {
        "ip": {"limit": 120, "window": 60},
    },

    # Booking submissions, by customer identity
    # limit=0 disables the check
    "booking": {
        "user": {"limit": 5, "window": 60},
    },
}

EXEMPT_PATHS = {"/health"}


# ============================================================
# CORE FUNCTIONS
# ============================================================

def _check_limit(redis: Redis, key: str, limit: int, window: int) -> tuple[bool, Optional[int]]:
    """
    Check a fixed-window counter. Returns (allowed, retry_after).

    limit=0 means disabled, always allow.
    """
    if limit <= 0:
        return True, None

    try:
        pipe = redis.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        if ttl == -1:
            redis.expire(key, window)
            ttl = window

        if count > limit:
            return False, ttl

        return True, None

    except Exception as e:
        logger.error(f"Rate limit check failed: {e}")
        return True, None  # fail open


def check_rate_limit(
    key_type: str,
    key_value: str,
    client_type: str = "public",
    redis: Redis | None = None,
) -> tuple[bool, Optional[int]]:
    """
    Generic rate limit check.

    Args:
        key_type: "ip", "user"
        key_value: value for the key
        client_type: limit group in RATE_LIMITS
    """
    config = RATE_LIMITS.get(client_type, {}).get(key_type)
    if not config:
        return True, None

    key = f"rl:{key_type}:{key_value}"
    return _check_limit(
        redis if redis is not None else redis_client,
        key,
        config["limit"],
        config["window"],
    )


def set_booking_rate_limit(limit: int, window: int = 60):
    """
    Change the booking submission limit at runtime (tests/ops).
    """
    RATE_LIMITS["booking"]["user"]["limit"] = limit
    RATE_LIMITS["booking"]["user"]["window"] = window
    logger.info(f"Booking rate limit updated: {limit}/{window}s")


# ============================================================
# MIDDLEWARE / DEPENDENCIES
# ============================================================

async def rate_limit_middleware(request: Request, call_next):
    """
    HTTP middleware: per-IP limit for every request except health checks.
    """
    if request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    ip = request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")

    allowed, retry = check_rate_limit("ip", ip, "public")
    if not allowed:
        # Exceptions raised in middleware bypass FastAPI handlers
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded"},
            headers={"Retry-After": str(retry or 1)},
        )

    return await call_next(request)


def booking_rate_limit(
    x_user_id: str | None = Header(None),
    redis: Redis = Depends(get_redis),
) -> None:
    """
    Dependency for booking submission: per-customer limit.
    """
    allowed, retry = check_rate_limit("user", hash_identity(x_user_id), "booking", redis=redis)
    if not allowed:
        logger.warning(f"Booking rate limit exceeded for user {x_user_id}")
        raise HTTPException(
            status_code=429,
            detail="You've submitted too many requests. Please try again later.",
            headers={"Retry-After": str(retry or 1)},
        )
