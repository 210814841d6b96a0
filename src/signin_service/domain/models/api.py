"""Authentication API Models

Purpose: Request/response models for authentication endpoints

Key Components:
- RegisterRequest / LoginRequest: Local account input validation
- UserProfile: Public user information for API responses
- ErrorResponse: Error envelope returned by every failing endpoint
"""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from signin_service.domain.models.user import UserRecord, to_json_compatible

EMAIL_PATTERN = r"^[^@]+@[^@]+\.[^@]+$"
MAX_PASSWORD_BYTES = 72


def _normalize_email(value: str) -> str:
    value = value.strip()
    if not re.match(EMAIL_PATTERN, value):
        raise ValueError("Invalid email format")
    return value.lower()


class LoginRequest(BaseModel):
    """Request model for email/password login"""

    email: str = Field(..., description="Account email address", examples=["alice@example.com"])
    password: str = Field(..., min_length=1, description="Account password")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _normalize_email(v)


class RegisterRequest(BaseModel):
    """Request model for local account registration"""

    name: str = Field(..., min_length=1, max_length=100, examples=["Alice"])
    email: str = Field(..., description="Account email address", examples=["alice@example.com"])
    password: str = Field(..., min_length=1, description="Account password")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _normalize_email(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name must not be blank")
        return v.strip()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        # bcrypt only accepts 72 bytes of input
        if len(v.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class UserProfile(BaseModel):
    """Public user profile information

    Excludes the stored password credential.
    """

    user_id: str = Field(..., examples=["550e8400-e29b-41d4-a716-446655440000"])
    name: str = Field(..., examples=["Alice"])
    email: Optional[str] = Field(None, examples=["alice@example.com"])
    created_at: str = Field(..., examples=["2025-01-15T10:00:00+00:00"])
    google_id: Optional[str] = None
    github_id: Optional[str] = None

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserProfile":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            created_at=to_json_compatible(user.created_at),
            google_id=user.google_id,
            github_id=user.github_id,
        )


class AuthResponse(BaseModel):
    """Successful authentication response"""

    success: bool = True
    message: str
    user: UserProfile


class LogoutResponse(BaseModel):
    """Logout response"""

    success: bool = True
    message: str = "Logged out successfully"


class ErrorResponse(BaseModel):
    """Error envelope"""

    success: bool = False
    status: int
    message: str
