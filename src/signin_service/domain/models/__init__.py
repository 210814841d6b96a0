"""Domain models for Sign-in Service"""

from signin_service.domain.models.api import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    UserProfile,
)
from signin_service.domain.models.user import (
    Provider,
    ProviderProfile,
    UserRecord,
    parse_utc_timestamp,
    to_json_compatible,
)

__all__ = [
    # User models
    "UserRecord",
    "Provider",
    "ProviderProfile",
    "parse_utc_timestamp",
    "to_json_compatible",
    # API models
    "LoginRequest",
    "RegisterRequest",
    "UserProfile",
    "AuthResponse",
    "LogoutResponse",
    "ErrorResponse",
]
