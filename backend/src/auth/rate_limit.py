"""Rate limiting for authentication and OTP endpoints.

Implements sliding window rate limiting to slow down credential stuffing
and OTP guessing. Uses Redis so limits hold across multiple API instances.
"""

import hashlib
import time
import uuid
from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends, Request
from redis import Redis
from redis.exceptions import RedisError

from config import get_settings
from domain.errors import RateLimitedError
from infrastructure.redis_client import get_redis_client


def _get_client_identifier(request: Request) -> str:
    """Extract a unique identifier for the client.

    Uses a combination of IP address and User-Agent to create a fingerprint.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    elif request.client:
        ip = request.client.host
    else:
        ip = "unknown"

    user_agent = request.headers.get("User-Agent", "")

    # Hash for privacy
    fingerprint = f"{ip}:{user_agent}"
    return hashlib.sha256(fingerprint.encode()).hexdigest()[:32]


def _get_rate_limit_key(identifier: str, endpoint: str) -> str:
    return f"rate_limit:{endpoint}:{identifier}"


class RateLimiter:
    """Rate limiter using Redis sliding window algorithm.

    With no Redis client every check passes (graceful degradation).
    """

    def __init__(self, redis: Optional[Redis], max_attempts: int = 5, window_seconds: int = 900):
        self.redis = redis
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    def is_rate_limited(self, request: Request, endpoint: str) -> bool:
        """Check if the client has used up its attempts in the current window."""
        if not self.redis:
            return False

        key = _get_rate_limit_key(_get_client_identifier(request), endpoint)
        window_start = time.time() - self.window_seconds

        try:
            # Remove old entries outside window
            self.redis.zremrangebyscore(key, 0, window_start)
            return self.redis.zcard(key) >= self.max_attempts
        except RedisError:
            return False

    def record_attempt(self, request: Request, endpoint: str) -> int:
        """Record an attempt and return the number of attempts in the window."""
        if not self.redis:
            return 0

        key = _get_rate_limit_key(_get_client_identifier(request), endpoint)
        now = time.time()

        try:
            # Unique member so attempts in the same second are all counted
            self.redis.zadd(key, {f"{now}:{uuid.uuid4().hex}": now})
            self.redis.expire(key, self.window_seconds)
            return self.redis.zcard(key)
        except RedisError:
            return 0

    def hit(self, request: Request, endpoint: str) -> None:
        """Check the limit and record the attempt.

        Raises:
            RateLimitedError: If the client is over the limit
        """
        if self.is_rate_limited(request, endpoint):
            raise RateLimitedError(
                "Too many attempts. Please wait before trying again.",
                retry_after=self.window_seconds,
            )
        self.record_attempt(request, endpoint)


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    """Process-wide rate limiter, connected lazily on first use."""
    settings = get_settings()
    return RateLimiter(
        redis=get_redis_client(settings.REDIS_URL),
        max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )


def rate_limit(endpoint: str) -> Callable[..., None]:
    """Build a dependency enforcing the rate limit for one endpoint.

    Use as a dependency in FastAPI endpoints:

        @router.post("/api/login", dependencies=[Depends(rate_limit("login"))])
        async def login(...):
            ...
    """
    def check_rate_limit(
        request: Request,
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        limiter.hit(request, endpoint)

    return check_rate_limit
