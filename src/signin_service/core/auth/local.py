"""Local authentication flow (email/password).

Registration and login against the user-record store, with bcrypt
credentials checked by the CredentialVerifier.
"""

import logging

from signin_service.domain.models import UserRecord

from .credentials import CredentialVerifier
from .errors import EmailAlreadyRegistered, InvalidCredentials, UserNotFound
from .store import UserStore

logger = logging.getLogger(__name__)


class LocalLoginFlow:
    """Email/password authentication.

    Unknown emails and wrong passwords fail with different errors
    (``UserNotFound`` vs ``InvalidCredentials``), so callers can tell an
    unregistered email apart from a bad password.
    """

    def __init__(self, user_store: UserStore, verifier: CredentialVerifier):
        self.user_store = user_store
        self.verifier = verifier
        self._dummy_hash = None

    async def authenticate(self, email: str, password: str) -> UserRecord:
        """Authenticate user with email and password.

        Args:
            email: User email address
            password: User password (plain text)

        Returns:
            The matching UserRecord

        Raises:
            UserNotFound: No account uses this email
            InvalidCredentials: Password does not match
            StoreError: User store unavailable
        """
        user = await self.user_store.find_by_email(email)
        if not user:
            # Spend the same bcrypt work as a password check
            await self.verifier.verify(await self._get_dummy_hash(), password)
            logger.warning(f"Login failed: User not found (email: {email})")
            raise UserNotFound("Incorrect email.")

        if not await self.verifier.verify(user.password_hash, password):
            logger.warning(f"Login failed: Invalid password (email: {email})")
            raise InvalidCredentials("Incorrect password.")

        logger.info(f"User authenticated successfully: {user.email} ({user.user_id})")
        return user

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await self.verifier.hash_password(
                self.verifier.generate_random_password()
            )
        return self._dummy_hash

    async def register(self, name: str, email: str, password: str) -> UserRecord:
        """Create a locally registered account.

        Raises:
            EmailAlreadyRegistered: An account already uses this email
            StoreError: User store unavailable
        """
        if await self.user_store.find_by_email(email):
            logger.warning(f"Registration attempt for existing email: {email}")
            raise EmailAlreadyRegistered(f"Email '{email}' is already registered.")

        password_hash = await self.verifier.hash_password(password)
        user = await self.user_store.create(
            {"name": name, "email": email, "password_hash": password_hash}
        )
        logger.info(f"User registered: {user.email} ({user.user_id})")
        return user
