"""Typed configuration for the hub, read from the environment and `.env`.

Only the database URL and the admin panel credentials are mandatory; the
Firebase, Resend and connector settings fall back to development defaults.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Hub settings. Field aliases are the environment variable names."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env_name: str = Field(default="development", alias="ENV_NAME")

    # Database
    database_url: str = Field(alias="DATABASE_URL")

    # Admin panel
    session_secret_key: str = Field(alias="SESSION_SECRET_KEY")
    admin_username: str = Field(alias="ADMIN_USERNAME")
    admin_password: str = Field(alias="ADMIN_PASSWORD")

    # CORS
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Email (Resend)
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")
    app_domain: str = Field(default="resend.dev", alias="APP_DOMAIN")
    client_url: str = Field(default="http://localhost:3000", alias="CLIENT_URL")

    # Firebase / Auth
    session_expires_days: int = Field(
        default=5, alias="SESSION_EXPIRES_DAYS", ge=1, le=14
    )
    firebase_api_key: str | None = Field(default=None, alias="FIREBASE_API_KEY")
    firebase_project_id: str | None = Field(default=None, alias="FIREBASE_PROJECT_ID")

    # Managed sites and wordpress.org
    hub_url: str = Field(default="http://localhost:8000", alias="HUB_URL")
    wordpress_api_url: str = Field(
        default="https://api.wordpress.org", alias="WORDPRESS_API_URL"
    )
    connector_timeout_seconds: float = Field(
        default=30.0, alias="CONNECTOR_TIMEOUT_SECONDS", gt=0
    )
    unread_poll_interval_seconds: int = Field(
        default=10, alias="UNREAD_POLL_INTERVAL_SECONDS", ge=1
    )

    @field_validator("hub_url", "wordpress_api_url", "client_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """CORS_ORIGINS split on commas, blanks dropped."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @computed_field
    @property
    def is_secure_cookie(self) -> bool:
        """Session cookies are Secure everywhere but local development and tests."""
        return self.env_name.lower() not in {"dev", "development", "local", "test"}

    @computed_field
    @property
    def session_expires_in(self) -> timedelta:
        """Get session expiration as timedelta."""
        return timedelta(days=self.session_expires_days)

    @computed_field
    @property
    def identity_toolkit_base_url(self) -> str:
        """Google Identity Toolkit API base URL."""
        return "https://identitytoolkit.googleapis.com"


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process; tests call ``cache_clear()``."""
    return Settings()
