"""Session identity mapping.

A session only carries the user's internal identifier; the full record is
looked up again on each request.
"""

from signin_service.domain.models import UserRecord

from .errors import UserNotFound
from .store import UserStore


class SessionIdentityMapper:
    """Converts between user records and session identities."""

    def __init__(self, user_store: UserStore):
        self.user_store = user_store

    @staticmethod
    def to_session_identity(user: UserRecord) -> str:
        return user.user_id

    async def from_session_identity(self, user_id: str) -> UserRecord:
        """Resolve a session identity back to its user record.

        Raises:
            UserNotFound: The record no longer exists
            StoreError: User store unavailable
        """
        user = await self.user_store.find_by_id(user_id)
        if not user:
            raise UserNotFound(f"User {user_id} not found")
        return user
