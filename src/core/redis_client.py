"""Connection to the Redis instance that holds live session ids."""

import redis
from django.conf import settings

_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Lazily build the process-wide client from REDIS_URL.

    Values come back as ``str`` so stored user ids compare directly with
    token claims.
    """

    global _client
    if _client is None:
        timeout = settings.REDIS_SOCKET_TIMEOUT_SECONDS
        _client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            health_check_interval=30,
        )
    return _client


__all__ = ["get_redis_client"]
