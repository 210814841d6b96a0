"""User Storage System

Purpose: Handle user record storage and retrieval operations

Redis-backed implementation of the UserStore contract used by the
authentication flows.

Storage Schema:
- auth:user:{user_id} -> {user_json}
- auth:email:{email} -> {user_id}
- auth:provider:{provider}:{provider_id} -> {user_id}
- auth:user_list -> {user_id, ...}

The email index keeps the first record registered for an address. Federated
records may share an email with an existing account without taking over its
index entry, so email/password login keeps resolving to the original account.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from signin_service.core.auth.errors import StoreError
from signin_service.core.auth.store import UserStore
from signin_service.domain.models import Provider, UserRecord

logger = logging.getLogger(__name__)


class RedisUserStore(UserStore):
    """User record storage backed by Redis

    Every Redis failure surfaces as StoreError; lookups never mask an
    outage as "not found".
    """

    def __init__(self, redis_client: Redis):
        """Initialize user store

        Args:
            redis_client: Redis connection for user storage
        """
        self.redis = redis_client

        # Redis key patterns
        self.user_key_pattern = "auth:user:{}"
        self.email_key_pattern = "auth:email:{}"
        self.provider_key_pattern = "auth:provider:{}:{}"
        self.user_list_key = "auth:user_list"

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Get user by ID

        Args:
            user_id: User identifier

        Returns:
            UserRecord if found, None otherwise
        """
        if not user_id:
            return None

        user_data = await self._redis_get(self.user_key_pattern.format(user_id))
        if not user_data:
            return None

        try:
            return UserRecord.from_dict(json.loads(user_data))
        except (ValueError, KeyError) as e:
            logger.error(f"Corrupt user record {user_id}: {e}")
            raise StoreError(f"Corrupt user record {user_id}") from e

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Get user by email address

        Args:
            email: Email address to search for

        Returns:
            UserRecord if found, None otherwise
        """
        if not email:
            return None

        user_id = await self._redis_get(self.email_key_pattern.format(email.strip().lower()))
        if not user_id:
            return None

        return await self.find_by_id(user_id)

    async def find_by_provider_id(
        self, provider: Provider, provider_id: str
    ) -> Optional[UserRecord]:
        """Get user by provider-issued identifier

        Args:
            provider: Identity provider
            provider_id: Identifier assigned by the provider

        Returns:
            UserRecord if found, None otherwise
        """
        if not provider_id:
            return None

        key = self.provider_key_pattern.format(provider.value, provider_id)
        user_id = await self._redis_get(key)
        if not user_id:
            return None

        return await self.find_by_id(user_id)

    async def create(self, fields: Dict[str, Any]) -> UserRecord:
        """Create new user record

        Args:
            fields: name, email, password_hash and optional provider ids

        Returns:
            Created UserRecord

        Raises:
            StoreError: If Redis is unavailable
        """
        email = fields.get("email")
        user = UserRecord(
            user_id=str(uuid.uuid4()),
            name=fields.get("name") or "",
            email=email.strip().lower() if email else email,
            password_hash=fields.get("password_hash"),
            created_at=datetime.now(timezone.utc),
            google_id=fields.get("google_id"),
            github_id=fields.get("github_id"),
        )

        await self._redis_set(self.user_key_pattern.format(user.user_id), json.dumps(user.to_dict()))

        if user.email:
            claimed = await self._redis_set(
                self.email_key_pattern.format(user.email), user.user_id, nx=True
            )
            if not claimed:
                logger.info(f"Email {user.email} already indexed; user {user.user_id} not indexed")

        for provider in Provider:
            provider_id = user.provider_id(provider)
            if provider_id:
                await self._redis_set(
                    self.provider_key_pattern.format(provider.value, provider_id), user.user_id
                )

        await self._redis_sadd(self.user_list_key, user.user_id)

        logger.info(f"Created user {user.user_id}", extra={"user_id": user.user_id})
        return user

    async def count_users(self) -> int:
        """Get total number of users"""
        try:
            return await self.redis.scard(self.user_list_key)
        except RedisError as e:
            logger.error(f"Redis SCARD failed for key {self.user_list_key}: {e}")
            raise StoreError("User store unavailable") from e

    # Redis async wrapper methods
    async def _redis_set(self, key: str, value: str, nx: bool = False):
        """Set Redis key"""
        try:
            return await self.redis.set(key, value, nx=nx)
        except RedisError as e:
            logger.error(f"Redis SET failed for key {key}: {e}")
            raise StoreError("User store unavailable") from e

    async def _redis_get(self, key: str) -> Optional[str]:
        """Get Redis key value"""
        try:
            result = await self.redis.get(key)
            return result if result else None
        except RedisError as e:
            logger.error(f"Redis GET failed for key {key}: {e}")
            raise StoreError("User store unavailable") from e

    async def _redis_sadd(self, key: str, value: str) -> None:
        """Add to Redis set"""
        try:
            await self.redis.sadd(key, value)
        except RedisError as e:
            logger.error(f"Redis SADD failed for key {key}: {e}")
            raise StoreError("User store unavailable") from e
