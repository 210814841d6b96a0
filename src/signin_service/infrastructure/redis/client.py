"""Redis Client for Sign-in Service

Provides async Redis client management for user records and sessions.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from signin_service.config.settings import get_settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Async Redis client wrapper"""

    def __init__(self, url: Optional[str] = None):
        """Initialize Redis client

        Args:
            url: Redis URL (defaults to the configured one)
        """
        self._url = url
        self._client: Optional[redis.Redis] = None

    async def connect(self):
        """Establish Redis connection"""
        if not self._client:
            url = self._url or get_settings().redis_url
            self._client = redis.from_url(url, decode_responses=True)
            await self._client.ping()
            logger.info(f"Connected to Redis: {url.rsplit('@', 1)[-1]}")

    async def disconnect(self):
        """Close Redis connection"""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from Redis")

    def get_client(self) -> redis.Redis:
        """Get the underlying Redis client

        Returns:
            Redis client instance

        Raises:
            RuntimeError: If client not connected
        """
        if not self._client:
            raise RuntimeError("Redis client not connected. Call connect() first.")
        return self._client


# Global Redis client instance
_redis_client: Optional[RedisClient] = None


async def get_redis_client(url: Optional[str] = None) -> RedisClient:
    """Get or create global Redis client

    Args:
        url: Redis URL used when the client is first created

    Returns:
        Connected RedisClient instance
    """
    global _redis_client
    if not _redis_client:
        client = RedisClient(url)
        await client.connect()
        _redis_client = client
    return _redis_client


async def close_redis_client():
    """Close global Redis client"""
    global _redis_client
    if _redis_client:
        await _redis_client.disconnect()
        _redis_client = None
