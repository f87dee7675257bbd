# backend/carbook/redis_client.py

from redis import Redis

from .config import settings

# Connection is lazy: nothing is opened until the first command.
redis_client = Redis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_timeout=settings.redis_socket_timeout,
)


def get_redis() -> Redis:
    """FastAPI dependency (overridden in tests)."""
    return redis_client
