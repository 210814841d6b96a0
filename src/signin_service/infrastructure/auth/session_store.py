"""Session Storage

Purpose: Persist session identities across requests

A session is an opaque random token handed to the browser as a cookie. Redis
maps the token's SHA-256 hash to the session identity (the user's internal
identifier); the token itself is never stored.

Storage Schema:
- auth:session:{token_hash} -> {user_id}   (expires with the session)
"""

import hashlib
import logging
import secrets
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from signin_service.core.auth.errors import StoreError

logger = logging.getLogger(__name__)


class RedisSessionStore:
    """Session identity storage backed by Redis"""

    def __init__(self, redis_client: Redis, ttl_seconds: int = 24 * 60 * 60):
        """Initialize session store

        Args:
            redis_client: Redis connection for session storage
            ttl_seconds: Session lifetime
        """
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.session_key_pattern = "auth:session:{}"

    async def create_session(self, user_id: str) -> str:
        """Start a session for a user

        Args:
            user_id: Session identity to persist

        Returns:
            Session token for the client
        """
        token = secrets.token_urlsafe(32)
        key = self.session_key_pattern.format(self._hash_token(token))

        try:
            await self.redis.setex(key, self.ttl_seconds, user_id)
        except RedisError as e:
            logger.error(f"Failed to create session for user {user_id}: {e}")
            raise StoreError("Session store unavailable") from e

        logger.info(f"Created session for user {user_id}", extra={"user_id": user_id})
        return token

    async def get_session_identity(self, token: str) -> Optional[str]:
        """Look up the session identity for a token

        Returns:
            User identifier, or None if the session is unknown or expired
        """
        if not token:
            return None

        try:
            user_id = await self.redis.get(self.session_key_pattern.format(self._hash_token(token)))
        except RedisError as e:
            logger.error(f"Session lookup failed: {e}")
            raise StoreError("Session store unavailable") from e

        return user_id or None

    async def revoke_session(self, token: str) -> bool:
        """End a session

        Returns:
            True if a live session was removed
        """
        if not token:
            return False

        try:
            deleted = await self.redis.delete(self.session_key_pattern.format(self._hash_token(token)))
        except RedisError as e:
            logger.error(f"Failed to revoke session: {e}")
            raise StoreError("Session store unavailable") from e

        return bool(deleted)

    def _hash_token(self, token: str) -> str:
        """Generate SHA-256 hash of token"""
        return hashlib.sha256(token.encode()).hexdigest()
