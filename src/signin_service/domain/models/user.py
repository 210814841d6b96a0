"""User Data Models

Purpose: Define data structures for user accounts and provider identities

Key Components:
- UserRecord: Represents one application account
- Provider: Supported external identity providers
- ProviderProfile: Profile attributes supplied by a provider
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


def parse_utc_timestamp(timestamp_str: str) -> datetime:
    """Parse UTC timestamp string to datetime object"""
    if isinstance(timestamp_str, datetime):
        return timestamp_str
    return datetime.fromisoformat(timestamp_str.replace('Z', '+00:00'))


def to_json_compatible(value):
    """Convert datetime to JSON-compatible ISO format string"""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class Provider(str, Enum):
    """External identity providers"""
    GOOGLE = "google"
    GITHUB = "github"

    @property
    def id_field(self) -> str:
        """Name of the UserRecord attribute holding this provider's identifier"""
        return f"{self.value}_id"


@dataclass
class UserRecord:
    """User account

    A record carries either a usable password credential or at least one
    provider identifier. Federated records also get a password hash, derived
    from a random value nobody knows.

    Attributes:
        user_id: Unique identifier (UUID format)
        name: Display name
        email: Email address (lowercased); Google may withhold it
        password_hash: bcrypt hash of the password credential
        created_at: Account creation timestamp
        google_id: Google-issued subject identifier
        github_id: GitHub-issued user identifier
    """
    user_id: str
    name: str
    email: Optional[str]
    password_hash: Optional[str]
    created_at: datetime
    google_id: Optional[str] = None
    github_id: Optional[str] = None

    def provider_id(self, provider: Provider) -> Optional[str]:
        """Return the identifier bound to this record for a provider"""
        return getattr(self, provider.id_field)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "created_at": to_json_compatible(self.created_at),
            "google_id": self.google_id,
            "github_id": self.github_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UserRecord':
        """Create from dictionary (JSON deserialization)"""
        return cls(
            user_id=data["user_id"],
            name=data.get("name") or "",
            email=data.get("email"),
            password_hash=data.get("password_hash"),
            created_at=parse_utc_timestamp(data["created_at"]),
            google_id=data.get("google_id"),
            github_id=data.get("github_id"),
        )


@dataclass
class ProviderProfile:
    """Profile attributes returned by an identity provider"""
    display_name: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)
