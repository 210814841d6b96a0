"""Configuration Settings for Sign-in Service

Manages environment variables and application configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Service info
    service_name: str = "signin-service"
    service_version: str = "1.0.0"
    environment: str = "development"

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False

    # Redis configuration
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components"""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Sessions
    session_secret: str = "dev-session-secret-change-in-production"
    session_ttl_seconds: int = 24 * 60 * 60  # 24 hours
    session_cookie_name: str = "signin_session"
    session_cookie_secure: bool = False
    oauth_state_ttl_seconds: int = 600

    # Password hashing
    bcrypt_rounds: int = 12

    # Google OAuth
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_callback_url: str = "/api/auth/google/callback"

    # GitHub OAuth
    github_client_id: Optional[str] = None
    github_client_secret: Optional[str] = None
    github_callback_url: str = "/api/auth/github/callback"
    github_placeholder_email: str = "unknown@example.com"

    # Where browsers land after a federated login (JSON response if unset)
    frontend_url: Optional[str] = None

    # CORS configuration
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    # Feature flags
    enable_registration: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance

    Returns:
        Settings instance
    """
    return Settings()
