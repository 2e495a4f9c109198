"""Application settings using Pydantic BaseSettings."""

import re

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_async_database_url() -> str:
    """Get database URL converted for the async drivers."""
    url = settings.database_url
    # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy async
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # asyncpg doesn't support sslmode, it uses ssl parameter
    if "sslmode=" in url:
        url = re.sub(r'[?&]sslmode=[^&]*', '', url)
        url = url.rstrip('?&')
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./estates.db"

    # JWT
    jwt_secret_key: str = "dev-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60

    # Application
    app_name: str = "Dubai Estates"
    environment: str = "development"
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"
    frontend_url: str = "http://localhost:3000"
    cors_allowed_origins: str = "*"

    # SendGrid (email transport is skipped when either value is missing)
    sendgrid_api_key: str | None = None
    sendgrid_from_email: str | None = None

    # Admin alerts
    admin_email: str | None = None  # Comma-separated override for admin alert emails
    reminder_fallback_email: str | None = None  # Used when a lead has no assignee

    # Follow-up scheduling
    first_follow_up_hours: int = 24
    follow_up_alert_window_hours: int = 24

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_email_configured(self) -> bool:
        """Whether outbound email can be attempted at all."""
        return bool(self.sendgrid_api_key and self.sendgrid_from_email)

    @property
    def cors_origins(self) -> list[str]:
        """CORS origins parsed from the comma-separated setting."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


settings = Settings()
