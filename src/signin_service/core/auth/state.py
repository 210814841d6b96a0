"""Signed OAuth ``state`` parameter.

The state is a short-lived HS256 JWT naming the provider it was issued for,
so callbacks need no server-side storage to check it.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from signin_service.domain.models import Provider

from .errors import ProviderError

logger = logging.getLogger(__name__)


class OAuthStateSigner:
    """Issues and checks CSRF state values for provider redirects."""

    algorithm = "HS256"

    def __init__(self, secret_key: str, ttl_seconds: int = 600):
        self.secret_key = secret_key
        self.ttl = timedelta(seconds=ttl_seconds)

    def issue(self, provider: Provider) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "provider": provider.value,
            "nonce": secrets.token_urlsafe(16),
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, state: str, provider: Provider) -> None:
        """Check that ``state`` was issued by us for ``provider``.

        Raises:
            ProviderError: If the state is missing, forged, expired or
                belongs to another provider
        """
        if not state:
            raise ProviderError("Missing OAuth state")

        try:
            payload = jwt.decode(state, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"OAuth state rejected: {e}")
            raise ProviderError("Invalid OAuth state") from e

        if payload.get("provider") != provider.value:
            raise ProviderError("OAuth state was issued for another provider")
