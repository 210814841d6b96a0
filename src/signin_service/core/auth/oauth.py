"""OAuth 2.0 provider clients (Google, GitHub).

Each client runs the authorization-code handshake for one provider and hands
back the provider-assigned user ID plus profile attributes. What happens to
that identity afterwards is up to FederatedLoginFlow.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from signin_service.domain.models import Provider, ProviderProfile

from .errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass
class ProviderConfig:
    """Client credentials for one OAuth provider.

    Attributes:
        client_id: OAuth 2.0 client ID
        client_secret: OAuth 2.0 client secret
        callback_url: Redirect URI registered with the provider; may be a
            path, in which case it is resolved against the request base URL
        scopes: Scopes to request
    """
    client_id: str
    client_secret: str
    callback_url: str
    scopes: list[str] = field(default_factory=list)

    def resolve_callback(self, base_url: str) -> str:
        if self.callback_url.startswith(("http://", "https://")):
            return self.callback_url
        return f"{base_url.rstrip('/')}/{self.callback_url.lstrip('/')}"


class OAuthProvider(ABC):
    """Authorization-code flow against a single provider."""

    provider: Provider
    authorize_url: str
    token_url: str
    profile_url: str
    default_scopes: list[str] = []

    def __init__(
        self,
        config: ProviderConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        """Initialize provider client.

        Args:
            config: Client credentials and callback
            transport: Optional httpx transport (used to stub the provider)
            timeout: Per-request timeout in seconds
        """
        self.config = config
        self.scopes = config.scopes or self.default_scopes
        self._transport = transport
        self._timeout = timeout

    def get_login_url(self, state: str, redirect_uri: str) -> str:
        """Generate the provider authorization URL.

        Args:
            state: CSRF protection state
            redirect_uri: Callback URL

        Returns:
            Authorization URL to redirect the user to
        """
        params = {
            "client_id": self.config.client_id,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "redirect_uri": redirect_uri,
            "state": state,
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> tuple[str, ProviderProfile]:
        """Exchange authorization code for the provider identity.

        Args:
            code: Authorization code from the provider callback
            redirect_uri: Same redirect_uri used in get_login_url

        Returns:
            Tuple of (provider_id, profile)

        Raises:
            ProviderError: If any step of the handshake fails
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    self.token_url,
                    data=data,
                    headers={
                        "Accept": "application/json",
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                )
                if response.status_code != 200:
                    logger.error(
                        f"{self.provider.value} token exchange failed: {response.text}"
                    )
                    raise ProviderError(f"Token exchange failed: {response.status_code}")

                tokens = response.json()
                access_token = tokens.get("access_token")
                if not access_token:
                    # GitHub answers 200 with an "error" field on bad codes
                    error = tokens.get("error_description") or tokens.get("error") or "no access token"
                    raise ProviderError(f"Token exchange failed: {error}")

                response = await client.get(
                    self.profile_url,
                    headers={
                        "Accept": "application/json",
                        "Authorization": f"Bearer {access_token}",
                    },
                )
                if response.status_code != 200:
                    logger.error(
                        f"{self.provider.value} profile request failed: {response.status_code}"
                    )
                    raise ProviderError(f"Profile request failed: {response.status_code}")

                payload = response.json()

        except httpx.HTTPError as e:
            logger.error(f"{self.provider.value} handshake failed: {e}")
            raise ProviderError(f"Could not reach {self.provider.value}: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Malformed response from {self.provider.value}") from e

        return self._parse_profile(payload)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    @abstractmethod
    def _parse_profile(self, payload: dict[str, Any]) -> tuple[str, ProviderProfile]:
        """Map the provider profile payload to (provider_id, profile)."""
        pass


class GoogleOAuthProvider(OAuthProvider):
    """Google sign-in via OpenID Connect userinfo."""

    provider = Provider.GOOGLE
    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    profile_url = "https://openidconnect.googleapis.com/v1/userinfo"
    default_scopes = ["openid", "email", "profile"]

    def _parse_profile(self, payload: dict[str, Any]) -> tuple[str, ProviderProfile]:
        subject = payload.get("sub")
        if not subject:
            raise ProviderError("Google profile has no subject identifier")

        return str(subject), ProviderProfile(
            display_name=payload.get("name"),
            name=payload.get("name"),
            email=payload.get("email"),
            raw=payload,
        )


class GitHubOAuthProvider(OAuthProvider):
    """GitHub sign-in via the REST user endpoint."""

    provider = Provider.GITHUB
    authorize_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    profile_url = "https://api.github.com/user"
    default_scopes = ["user:email"]

    def _parse_profile(self, payload: dict[str, Any]) -> tuple[str, ProviderProfile]:
        user_id = payload.get("id")
        if user_id is None:
            raise ProviderError("GitHub profile has no user id")

        return str(user_id), ProviderProfile(
            display_name=payload.get("name") or payload.get("login"),
            name=payload.get("name"),
            email=payload.get("email"),
            raw=payload,
        )
