"""Authentication core.

Supports local (email/password) login and federated login through
Google and GitHub, plus mapping of users to session identities.
"""

from .credentials import CredentialVerifier
from .errors import (
    AuthError,
    EmailAlreadyRegistered,
    InvalidCredentials,
    ProviderError,
    StoreError,
    UserNotFound,
)
from .factory import AuthStrategies, build_strategies
from .federated import FederatedLoginFlow
from .local import LocalLoginFlow
from .session import SessionIdentityMapper
from .store import UserStore

__all__ = [
    "AuthError",
    "AuthStrategies",
    "CredentialVerifier",
    "EmailAlreadyRegistered",
    "FederatedLoginFlow",
    "InvalidCredentials",
    "LocalLoginFlow",
    "ProviderError",
    "SessionIdentityMapper",
    "StoreError",
    "UserNotFound",
    "UserStore",
    "build_strategies",
]
