"""Federated authentication flow (Google, GitHub).

Reconciles a provider-issued identity with local user records: an identity
seen before resolves to its record, a new one gets a fresh record.
"""

import logging

from signin_service.domain.models import Provider, ProviderProfile, UserRecord

from .credentials import CredentialVerifier
from .store import UserStore

logger = logging.getLogger(__name__)


class FederatedLoginFlow:
    """Find-or-create of user records keyed by provider identifier.

    Records are matched on provider identifier only. A provider login never
    attaches to an existing account with the same email, so Google, GitHub and
    local sign-ups for one email produce independent records. Find-or-create
    is not atomic; two concurrent first logins may both create a record.
    """

    def __init__(
        self,
        user_store: UserStore,
        verifier: CredentialVerifier,
        placeholder_email: str = "unknown@example.com",
    ):
        self.user_store = user_store
        self.verifier = verifier
        self.placeholder_email = placeholder_email

    async def authenticate(
        self, provider: Provider, provider_id: str, profile: ProviderProfile
    ) -> UserRecord:
        """Resolve a provider identity to a user record.

        Args:
            provider: Identity provider that issued ``provider_id``
            provider_id: Provider-assigned user identifier
            profile: Profile attributes supplied by the provider

        Returns:
            The existing record for this identity, or a newly created one

        Raises:
            StoreError: User store unavailable
        """
        user = await self.user_store.find_by_provider_id(provider, provider_id)
        if user:
            logger.info(
                f"Federated login for existing user {user.user_id}",
                extra={"provider": provider.value, "user_id": user.user_id},
            )
            return user

        fields = self._new_user_fields(provider, provider_id, profile)
        # The random password is hashed and dropped; nobody can log in locally with it
        fields["password_hash"] = await self.verifier.hash_password(
            self.verifier.generate_random_password()
        )
        user = await self.user_store.create(fields)

        logger.info(
            f"Created user {user.user_id} from first {provider.value} login",
            extra={"provider": provider.value, "user_id": user.user_id},
        )
        return user

    def _new_user_fields(
        self, provider: Provider, provider_id: str, profile: ProviderProfile
    ) -> dict:
        if provider is Provider.GITHUB:
            name = profile.display_name
            email = profile.email or self.placeholder_email
        else:
            name = profile.name
            email = profile.email

        return {
            provider.id_field: provider_id,
            "name": name or "",
            "email": email,
        }
