"""Authentication strategy assembly.

Builds every flow from explicit settings and a user store. Nothing here is
global: the application keeps the result on ``app.state``.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from signin_service.config.settings import Settings
from signin_service.domain.models import Provider

from .credentials import CredentialVerifier
from .errors import ProviderError
from .federated import FederatedLoginFlow
from .local import LocalLoginFlow
from .oauth import GitHubOAuthProvider, GoogleOAuthProvider, OAuthProvider, ProviderConfig
from .session import SessionIdentityMapper
from .state import OAuthStateSigner
from .store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class AuthStrategies:
    """All authentication flows sharing one user store."""
    verifier: CredentialVerifier
    local: LocalLoginFlow
    federated: FederatedLoginFlow
    sessions: SessionIdentityMapper
    state_signer: OAuthStateSigner
    providers: Dict[Provider, OAuthProvider] = field(default_factory=dict)

    def get_provider(self, provider: Provider) -> OAuthProvider:
        """Return the configured OAuth client for ``provider``.

        Raises:
            ProviderError: If the provider has no client credentials
        """
        client = self.providers.get(provider)
        if client is None:
            raise ProviderError(f"{provider.value} login is not configured")
        return client


def provider_configs(settings: Settings) -> Dict[Provider, ProviderConfig]:
    """Collect client credentials for every provider that has them."""
    configs: Dict[Provider, ProviderConfig] = {}

    if settings.google_client_id and settings.google_client_secret:
        configs[Provider.GOOGLE] = ProviderConfig(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            callback_url=settings.google_callback_url,
        )

    if settings.github_client_id and settings.github_client_secret:
        configs[Provider.GITHUB] = ProviderConfig(
            client_id=settings.github_client_id,
            client_secret=settings.github_client_secret,
            callback_url=settings.github_callback_url,
        )

    return configs


def build_strategies(
    settings: Settings,
    user_store: UserStore,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AuthStrategies:
    """Wire the authentication flows.

    Args:
        settings: Application settings
        user_store: User-record store shared by all flows
        transport: Optional httpx transport for the OAuth clients

    Returns:
        Assembled AuthStrategies
    """
    if settings.session_secret == "dev-session-secret-change-in-production":
        logger.warning(
            "Using default SESSION_SECRET! "
            "Set SESSION_SECRET environment variable in production!"
        )

    verifier = CredentialVerifier(rounds=settings.bcrypt_rounds)
    provider_classes = {
        Provider.GOOGLE: GoogleOAuthProvider,
        Provider.GITHUB: GitHubOAuthProvider,
    }
    providers = {
        provider: provider_classes[provider](config, transport=transport)
        for provider, config in provider_configs(settings).items()
    }

    for provider in Provider:
        if provider in providers:
            logger.info(f"{provider.value} login enabled")
        else:
            logger.info(f"{provider.value} login disabled (no client credentials)")

    return AuthStrategies(
        verifier=verifier,
        local=LocalLoginFlow(user_store, verifier),
        federated=FederatedLoginFlow(
            user_store, verifier, placeholder_email=settings.github_placeholder_email
        ),
        sessions=SessionIdentityMapper(user_store),
        state_signer=OAuthStateSigner(
            settings.session_secret, ttl_seconds=settings.oauth_state_ttl_seconds
        ),
        providers=providers,
    )
