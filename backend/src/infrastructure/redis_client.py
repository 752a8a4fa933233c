"""Shared Redis connection for rate limiting and one-time passcodes."""

import logging
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def get_redis_client(url: str, timeout_seconds: float = 2.0) -> Optional[Redis]:
    """Connect to Redis and check it answers.

    Returns None if Redis is not available, allowing graceful degradation.
    """
    try:
        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=timeout_seconds,
            socket_timeout=timeout_seconds,
        )
        client.ping()
        return client
    except RedisError as e:
        logger.warning(f"Redis unavailable at {url}: {e}")
        return None
