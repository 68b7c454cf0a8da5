"""Application configuration."""
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    DATABASE_URL and JWT_SECRET have no defaults: constructing Settings without
    them raises, so the process refuses to start with a missing secret.
    """

    # App
    APP_NAME: str = "Cemetery Operations API"
    ENV: Literal["development", "production", "test"] = "development"
    PORT: int = Field(default=3000, ge=1, le=65535)
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    # Comma-separated; required (and must be explicit) in production.
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    # Database
    DATABASE_URL: str = Field(min_length=1)
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 5
    # Seconds to wait for a pooled connection before failing.
    DATABASE_POOL_TIMEOUT: float = 2.0

    # JWT
    JWT_SECRET: str = Field(min_length=32)
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24

    # Request bodies
    MAX_BODY_BYTES: int = Field(default=100 * 1024, ge=1)

    # CSRF
    CSRF_COOKIE_NAME: str = "csrf-token"
    CSRF_HEADER_NAME: str = "x-csrf-token"
    CSRF_COOKIE_MAX_AGE: int = 24 * 60 * 60

    # Rate limits (fixed window, per client address)
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_MAX_REQUESTS: int = 100
    AUTH_RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    AUTH_RATE_LIMIT_MAX_REQUESTS: int = 10
    # When set, counters are shared through Redis instead of process memory.
    REDIS_URL: str | None = None

    # Proxy / client IP handling
    # Only trust X-Forwarded-* headers when running behind a trusted reverse proxy.
    TRUST_PROXY_HEADERS: bool = False

    # Shutdown
    SHUTDOWN_TIMEOUT_SECONDS: float = 10.0

    # Initial admin (create_admin.py)
    INITIAL_ADMIN_EMAIL: str | None = None
    INITIAL_ADMIN_PASSWORD: str | None = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("LOG_LEVEL")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL '{value}'")
        return upper

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def check_production_safety(self) -> None:
        """Fail closed on insecure production configuration."""
        if not self.is_production:
            return
        if not self.cors_origins:
            raise RuntimeError("ALLOWED_ORIGINS must be set in production (explicit frontend origin required).")
        if any(origin == "*" for origin in self.cors_origins):
            raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard when using credentials).")
        if any(
            origin.startswith("http://localhost") or origin.startswith("http://127.0.0.1")
            for origin in self.cors_origins
        ):
            raise RuntimeError("ALLOWED_ORIGINS contains localhost in production; set it to your real frontend origin.")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
