"""Health check utilities for ReviewFlow.

Provides health and readiness checks for the database, Redis and object storage.
"""

import logging
import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass

from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.errors import StorageError
from infrastructure.storage import S3StorageAdapter

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def check_database_health(db: Session) -> ComponentHealth:
    try:
        start = time.perf_counter()
        db.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message="Database unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Database connection OK",
        latency_ms=round(latency_ms, 2)
    )


def check_redis_health(url: str) -> ComponentHealth:
    """Check Redis connectivity.

    Redis is optional (rate limiting and OTP storage degrade without it),
    so a failure reports DEGRADED rather than UNHEALTHY.
    """
    try:
        client = Redis.from_url(url, socket_connect_timeout=2, socket_timeout=2)
        start = time.perf_counter()
        client.ping()
        latency_ms = (time.perf_counter() - start) * 1000
    except RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return ComponentHealth(status=HealthStatus.DEGRADED, message="Redis unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Redis connection OK",
        latency_ms=round(latency_ms, 2)
    )


async def check_object_storage_health(storage: S3StorageAdapter) -> ComponentHealth:
    try:
        start = time.perf_counter()
        await storage.verify_bucket_exists()
        latency_ms = (time.perf_counter() - start) * 1000
    except StorageError as e:
        logger.error(f"Object storage health check failed: {e}")
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message="Object storage unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Object storage connection OK",
        latency_ms=round(latency_ms, 2)
    )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Determine overall health from component statuses."""
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY

    if any(c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY

    return HealthStatus.DEGRADED
