"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Interview Studio"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # development, staging, production

    # Database
    DATABASE_URL: str = "sqlite:///./interview_studio.db"

    # SSO / external identity provider
    SSO_URL: str = "http://localhost:9000"
    SSO_APP_ID: str = "interview-studio"
    SSO_ISSUER: str = "centralized-auth"
    SSO_PUBLIC_KEY_PATH: Optional[str] = None  # Path to RS256 public key
    SSO_TIMEOUT_SECONDS: float = 10.0

    # Internal Token (HS256)
    SECRET_KEY: str = PLACEHOLDER_SECRET_KEY
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720  # 12 hours
    ALGORITHM: str = "HS256"

    # Cookie settings
    COOKIE_NAME: str = "interview_studio_token"
    COOKIE_DOMAIN: Optional[str] = None  # None = use request domain
    COOKIE_SECURE: bool = True
    COOKIE_SAMESITE: str = "lax"

    # Frontend URL (login redirect and candidate interview links)
    FRONTEND_URL: str = "http://localhost:3000"

    # AWS SES for candidate invitations
    SES_ENABLED: bool = False
    SES_FROM_EMAIL: str = "interviews@example.com"
    SES_FROM_NAME: str = "Interview Studio"
    SES_REGION: str = "us-west-2"
    SES_ACCESS_KEY_ID: Optional[str] = None
    SES_SECRET_ACCESS_KEY: Optional[str] = None

    # Editor
    TEMP_ID_PREFIX: str = "tmp-"
    DEFAULT_INTERVIEW_TITLE: str = "New Interview"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    @model_validator(mode="after")
    def require_real_secret_in_production(self) -> "Settings":
        if self.ENVIRONMENT == "production" and self.SECRET_KEY == PLACEHOLDER_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
