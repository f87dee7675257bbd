"""
Owner-facing pending booking counter.

Key: owner:pending:{owner_id}: integer, number of bookings waiting for the
owner's decision. Used for the dashboard badge.

The counter is a side channel: updates are best-effort and a failure never
affects the booking row itself. The database stays the source of truth.
"""

import logging

from redis import Redis

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

KEY_PREFIX = "owner:pending"


def _key(owner_id: str) -> str:
    return f"{KEY_PREFIX}:{owner_id}"


def increment_pending(owner_id: str, redis: Redis | None = None) -> int | None:
    """Increment the counter. Returns the new value, or None on failure."""
    redis = redis if redis is not None else redis_client
    try:
        return redis.incr(_key(owner_id))
    except Exception as e:
        logger.error(f"Pending counter increment failed for owner {owner_id}: {e}")
        return None


def decrement_pending(owner_id: str, redis: Redis | None = None) -> int | None:
    """Decrement the counter, never below zero."""
    redis = redis if redis is not None else redis_client
    try:
        value = redis.decr(_key(owner_id))
        if value < 0:
            redis.set(_key(owner_id), 0)
            return 0
        return value
    except Exception as e:
        logger.error(f"Pending counter decrement failed for owner {owner_id}: {e}")
        return None


def get_pending(owner_id: str, redis: Redis | None = None) -> int | None:
    """Current counter value (0 if never set), None if Redis is unavailable."""
    redis = redis if redis is not None else redis_client
    try:
        raw = redis.get(_key(owner_id))
    except Exception as e:
        logger.error(f"Pending counter read failed for owner {owner_id}: {e}")
        return None
    return int(raw) if raw else 0
