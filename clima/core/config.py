# clima/core/config.py
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (signs reset links and session tokens)

    Usually set in production:
      - DATABASE_URL (Supabase Postgres connection string)
      - RESET_PASSWORD_URL (front-end change-password page)
      - SENDGRID_API_KEY + MAIL_FROM_EMAIL

    Optional:
      - SMTP_* (only used when SENDGRID_API_KEY is empty)
    """

    PROJECT_NAME: str = "Clima Backend"
    API_PREFIX: str = "/api"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Supabase Postgres (sqlite is accepted for local runs)
    DATABASE_URL: str = "sqlite:///./clima.db"

    # Token signing
    JWT_SECRET: str
    JWT_ALG: str = "HS256"
    RESET_TOKEN_EXPIRE_MINUTES: int = 15
    SESSION_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Password reset
    RESET_PASSWORD_URL: str = "http://localhost:5173/changepassword"
    RESET_REQUIRES_TOKEN: bool = False

    # Outbound mail: SendGrid first, SMTP as fallback transport
    SENDGRID_API_KEY: str | None = None
    MAIL_FROM_EMAIL: str | None = None
    MAIL_FROM_NAME: str = "Clima"

    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False

    # CORS allow-list, comma separated
    CORS_ORIGINS: str = "https://front-clima-latest.onrender.com,http://localhost:5173"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("RESET_PASSWORD_URL")
    @classmethod
    def _strip_query(cls, value: str) -> str:
        # Reset links append their own query string.
        return value.split("?", 1)[0]

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.CORS_ORIGINS.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
