"""Valkey/Redis connection management with async client."""

import json
from typing import Any

import redis.asyncio as redis
from redis.asyncio import Redis

from devit.core.config import settings
from devit.core.logging import get_logger
from devit.core.tracing import trace_cache

# FakeRedis backs the cache when no Valkey URL is configured (tests, local dev)
try:
    from fakeredis import FakeAsyncRedis
    FAKEREDIS_AVAILABLE = True
except ImportError:
    FAKEREDIS_AVAILABLE = False

logger = get_logger(__name__)


class CacheErrorMessage:
    """Standardized cache error messages."""

    CREATE_CLIENT_NO_URL = "VALKEY_URL is not configured"
    CREATE_CLIENT_FAILED = "Failed to create Valkey client"
    CLOSE_CACHE_FAILED = "Failed to close cache connections"


def create_client() -> Redis:
    """Create async Redis client with connection pooling.

    Returns:
        Redis: Configured async Redis client (or FakeRedis when no URL is set)

    Raises:
        ValueError: If Valkey URL is missing and FakeRedis is unavailable, or the URL is invalid
    """
    try:
        if not settings.valkey_url and FAKEREDIS_AVAILABLE:
            logger.info("Creating FakeRedis client")
            return FakeAsyncRedis(decode_responses=True)  # type: ignore[return-value]

        if not settings.valkey_url:
            raise ValueError(CacheErrorMessage.CREATE_CLIENT_NO_URL)

        logger.info(
            "Creating async Valkey client",
            url=settings.valkey_url.split("@")[1] if "@" in settings.valkey_url else "***",
            max_connections=20,
        )

        client: Redis = redis.from_url(  # type: ignore[no-untyped-call]
            settings.valkey_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=20,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )

        return client
    except ValueError:
        raise
    except Exception as e:
        logger.error(
            f"Failed to create Valkey client due to configuration error: {e}"
        )
        raise ValueError(CacheErrorMessage.CREATE_CLIENT_FAILED) from e


cache_client: Any = create_client()


async def get_cache() -> Redis | None:
    """FastAPI dependency for cache access.

    The cache only ever holds derived data, so an unreachable server yields
    None and callers go straight to the database.
    """
    try:
        await cache_client.ping()
        return cache_client
    except Exception as e:
        logger.warning("Cache unavailable, continuing without it", error=str(e))
        return None


@trace_cache()
async def get_json(client: Redis | None, key: str) -> Any | None:
    """Return the decoded JSON stored at key, or None on miss or cache failure."""
    if client is None:
        return None
    try:
        raw = await client.get(key)
    except Exception as e:
        logger.warning("Cache read failed", key=key, error=str(e))
        return None
    if raw is None:
        logger.debug("Cache miss", key=key)
        return None
    logger.debug("Cache hit", key=key)
    return json.loads(raw)


@trace_cache()
async def set_json(client: Redis | None, key: str, value: Any, ttl_seconds: int) -> None:
    if client is None:
        return
    try:
        await client.set(key, json.dumps(value, default=str), ex=ttl_seconds)
    except Exception as e:
        logger.warning("Cache write failed", key=key, error=str(e))


@trace_cache()
async def invalidate(client: Redis | None, *keys: str) -> None:
    """Delete keys; a failure is logged and left to expire via TTL."""
    if client is None or not keys:
        return
    try:
        await client.delete(*keys)
        logger.debug("Cache invalidated", keys=list(keys))
    except Exception as e:
        logger.warning("Cache invalidation failed", keys=list(keys), error=str(e))


@trace_cache()
async def check_cache_connection() -> bool:
    """Check if cache connection is available.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        await cache_client.ping()
        logger.debug("Cache connection check passed")
        return True
    except Exception as e:
        logger.error(f"Cache connection check failed with error: {e}")
        return False


@trace_cache()
async def close_cache() -> None:
    """Close all cache connections. Called during application shutdown.

    Raises:
        RuntimeError: If graceful shutdown fails
    """
    try:
        logger.info("Closing cache connections")
        await cache_client.aclose()
        if hasattr(cache_client, "connection_pool"):
            await cache_client.connection_pool.disconnect()
    except Exception as e:
        logger.error(f"Error closing cache connections: {e}")
        raise RuntimeError(CacheErrorMessage.CLOSE_CACHE_FAILED) from e
