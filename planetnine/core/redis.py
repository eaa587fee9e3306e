# ruff: noqa: PLW0603
"""Redis connection management.

Redis backs the fixed-window throttling of the public contact and
enrollment forms. The API keeps working without it (limits are skipped).
"""

import redis.asyncio as redis

from planetnine.config import get_settings
from planetnine.core.exceptions import RateLimitExceededError
from planetnine.core.logging import get_logger


logger = get_logger(__name__)

_redis_client: redis.Redis | None = None


async def init_redis() -> redis.Redis:
    """Initialize Redis connection pool."""
    global _redis_client

    settings = get_settings()

    _redis_client = redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_connect_timeout,
        decode_responses=True,
    )

    try:
        await _redis_client.ping()
        logger.info("redis_connected", url=settings.redis_url)
    except redis.ConnectionError as e:
        logger.warning("redis_connection_failed", error=str(e))
        _redis_client = None
        raise

    return _redis_client


async def shutdown_redis() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client:
        await _redis_client.aclose()
        logger.info("redis_disconnected")
        _redis_client = None


def get_redis() -> redis.Redis | None:
    """Get Redis client instance."""
    return _redis_client


class RateLimiter:
    """Fixed-window request counter keyed by action and client.

    Example:
        limiter = RateLimiter(get_redis())
        await limiter.hit("contact_form", client_ip, limit=5)
    """

    WINDOW_SECONDS = 60

    def __init__(self, client: redis.Redis | None):
        self.client = client

    @staticmethod
    def key(action: str, identifier: str) -> str:
        return f"ratelimit:{action}:{identifier}"

    async def hit(self, action: str, identifier: str, limit: int) -> int:
        """Count one request and enforce the per-window limit.

        Returns:
            Number of requests seen in the current window (0 without Redis).

        Raises:
            RateLimitExceededError: If the count goes over ``limit``.
        """
        if not self.client:
            return 0

        key = self.key(action, identifier)
        pipe = self.client.pipeline()
        pipe.incr(key)
        pipe.expire(key, self.WINDOW_SECONDS, nx=True)
        count, _ = await pipe.execute()

        if int(count) > limit:
            logger.warning(
                "rate_limit_exceeded", action=action, identifier=identifier, count=count
            )
            raise RateLimitExceededError
        return int(count)
