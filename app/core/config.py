"""
Centralized configuration management.

- All secrets (DB credentials, JWT signing key, Redis password) MUST come from
  environment variables or a `.env` file (never hardcoded)
- Configuration is centralized in this module and handed to `create_app()`
- Do not spread os.getenv calls all over the codebase
- Do not log secrets or environment values
"""
from __future__ import annotations
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Postgres ---
    PG_HOST: str = Field(default="localhost", description="PostgreSQL host")
    PG_PORT: int = Field(default=5432, description="PostgreSQL port")
    PG_DB: str = Field(default="crm", description="PostgreSQL database name")
    PG_USER: str = Field(default="crm", description="PostgreSQL user")
    PG_PASSWORD: str = Field(default="", description="PostgreSQL password")
    PG_SSLMODE: str = Field(default="require", description="PostgreSQL SSL mode (require/disable)")
    PG_POOL_MIN: int = Field(default=1, ge=1, description="Minimum pooled connections")
    PG_POOL_MAX: int = Field(default=10, ge=1, description="Maximum pooled connections")

    # --- Session tokens ---
    JWT_SECRET: str = Field(..., description="JWT signing secret key")
    JWT_EXP_MIN: int = Field(default=24 * 60, ge=1, description="Session token lifetime in minutes")
    AUTH_COOKIE_NAME: str = Field(default="authToken", description="Cookie carrying the session token")
    AUTH_COOKIE_SECURE: bool = Field(default=False, description="Send the session cookie over HTTPS only")

    # --- Passwords ---
    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=31, description="bcrypt cost factor")

    # --- Redis/Valkey ---
    REDIS_HOST: str = Field(default="redis", description="Redis host")
    REDIS_PORT: int = Field(default=6379, description="Redis port")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password")
    REDIS_SSL: str = Field(default="false", description="Redis SSL enabled (true/false)")
    MASTER_DATA_CACHE_TTL: int = Field(default=3600, ge=0, description="Master data cache TTL in seconds")

    # --- HTTP ---
    CORS_ORIGINS: str = Field(default="", description="CORS allowed origins (comma-separated)")
    LOG_LEVEL: str = Field(default="INFO", description="Log level for the crm logger")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("JWT_SECRET")
    @classmethod
    def _secret_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_SECRET must be a non-empty string")
        return v

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def session_max_age(self) -> int:
        """Cookie Max-Age in seconds, matching the token lifetime."""
        return self.JWT_EXP_MIN * 60


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process. Raises if JWT_SECRET is missing."""
    return Settings()
