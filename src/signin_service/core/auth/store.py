"""User-record store interface.

The authentication flows only depend on this contract; the Redis-backed
implementation lives in ``signin_service.infrastructure.auth.user_store``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from signin_service.domain.models import Provider, UserRecord


class UserStore(ABC):
    """Persistence contract for user records.

    Every method raises StoreError when the backing store is unavailable.
    """

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Return the record registered with ``email``, if any."""
        pass

    @abstractmethod
    async def find_by_provider_id(
        self, provider: Provider, provider_id: str
    ) -> Optional[UserRecord]:
        """Return the record bound to ``provider_id`` for ``provider``, if any."""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Return the record with internal identifier ``user_id``, if any."""
        pass

    @abstractmethod
    async def create(self, fields: Dict[str, Any]) -> UserRecord:
        """Persist a new record built from ``fields`` and return it.

        ``fields`` holds name, email, password_hash and optionally
        google_id / github_id. The store assigns user_id and created_at.
        """
        pass
