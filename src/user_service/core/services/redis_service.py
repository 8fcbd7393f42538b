"""Redis connection service for managing Redis client lifecycle and health checks."""

from typing import Any

import redis.asyncio as redis_async
from loguru import logger
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff

from user_service.runtime.config.config_data import RedisConfig
from user_service.runtime.context import get_config

# One retry after 0.2 s. A cache outage costs a request at most two socket
# timeouts plus 0.2 s before it falls through to the store.
CACHE_RETRIES = 1
CACHE_BACKOFF_BASE = 0.1
CACHE_BACKOFF_CAP = 1.0


def build_retry() -> Retry:
    return Retry(
        ExponentialBackoff(cap=CACHE_BACKOFF_CAP, base=CACHE_BACKOFF_BASE),
        retries=CACHE_RETRIES,
    )


class RedisService:
    """Owns the process-wide Redis client.

    Provides connection pooling, health checks and graceful shutdown. The
    client it hands out backs the record cache.
    """

    def __init__(self, redis_config: RedisConfig | None = None):
        logger.info("Setting up Redis service")
        redis_config = redis_config or get_config().redis

        self._enabled = redis_config.enabled
        self._client = None
        url = redis_config.url

        if not self._enabled:
            logger.info("Redis is disabled, service will not connect")
            return

        if not url:
            logger.warning("Redis URL not configured, service will not connect")
            self._enabled = False
            return

        logger.info(
            "Initializing Redis client with connection string: {}",
            redis_config.sanitized_connection_string,
        )

        retry = build_retry()

        self._client = redis_async.from_url(
            redis_config.connection_string,
            encoding="utf-8",
            decode_responses=redis_config.decode_responses,
            encoding_errors="replace",
            max_connections=redis_config.max_connections,
            socket_timeout=redis_config.socket_timeout,
            socket_connect_timeout=redis_config.socket_connect_timeout,
            socket_keepalive=True,
            health_check_interval=30,
            retry=retry,
            client_name="user_service_cache",
        )

        logger.info(
            "Redis client initialized",
            extra={
                "max_connections": redis_config.max_connections,
                "socket_timeout": redis_config.socket_timeout,
            },
        )

    def get_client(self):
        """Get the Redis async client instance.

        Returns:
            Redis async client if enabled and connected, None otherwise.
        """
        if not self._enabled:
            logger.debug("Redis is disabled, returning None")
            return None

        return self._client

    async def health_check(self) -> bool:
        """PING the server; False when disabled or unreachable."""
        if not self._enabled or not self._client:
            return False

        try:
            await self._client.ping()
            return True
        except Exception as e:
            logger.error(
                "Redis health check failed",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            return False

    async def get_info(self) -> dict[str, Any] | None:
        """Get Redis server information for monitoring."""
        if not self._enabled or not self._client:
            return None

        try:
            info = await self._client.info()
        except Exception as e:
            logger.error(
                "Failed to get Redis info",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            return None

        return {
            "version": info.get("redis_version"),
            "uptime_seconds": info.get("uptime_in_seconds"),
            "connected_clients": info.get("connected_clients"),
            "used_memory_human": info.get("used_memory_human"),
        }

    async def close(self) -> None:
        """Close the Redis connection and clean up resources."""
        if not self._client:
            return

        try:
            logger.info("Closing Redis connection")
            await self._client.aclose()
        except Exception as e:
            logger.error(
                "Error closing Redis connection",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
        finally:
            self._client = None

    @property
    def is_enabled(self) -> bool:
        return self._enabled
