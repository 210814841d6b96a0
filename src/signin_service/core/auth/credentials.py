"""Password credential hashing and verification."""

import asyncio
import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72


class CredentialVerifier:
    """bcrypt-backed password credentials.

    Stored credentials are bcrypt hashes; the plaintext password is never
    kept. Hashing and checking run in a worker thread since bcrypt is
    deliberately slow.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash_password_sync(self, password: str) -> str:
        if len(password.encode()) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password exceeds {BCRYPT_MAX_BYTES} bytes")
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify_sync(self, stored_credential: str, submitted_password: str) -> bool:
        if not stored_credential:
            return False
        if len(submitted_password.encode()) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(submitted_password.encode(), stored_credential.encode())
        except ValueError:
            # Malformed hash (e.g. imported record)
            logger.warning("Stored credential is not a valid bcrypt hash")
            return False

    async def hash_password(self, password: str) -> str:
        """Hash a plaintext password for storage."""
        return await asyncio.to_thread(self.hash_password_sync, password)

    async def verify(self, stored_credential: str, submitted_password: str) -> bool:
        """Check a submitted password against a stored credential.

        Args:
            stored_credential: bcrypt hash taken from the user record
            submitted_password: plaintext password from the login attempt

        Returns:
            True if the password matches, False otherwise
        """
        return await asyncio.to_thread(self.verify_sync, stored_credential, submitted_password)

    @staticmethod
    def generate_random_password() -> str:
        """Random password for accounts that never log in locally."""
        return secrets.token_urlsafe(32)
