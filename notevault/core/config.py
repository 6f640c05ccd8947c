"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
# sqlite is accepted for local development and the test suite.
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
)


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    CORS_ORIGINS: list[str] = ["*"]

    DATABASE_URL: str = "sqlite:///./notes.db"

    # Password hashing cost (bcrypt rounds)
    BCRYPT_ROUNDS: int = 12

    # Account lockout after consecutive failed logins
    LOCKOUT_THRESHOLD: int = 3
    LOCKOUT_MINUTES: int = 5

    # Anti-forgery tokens issued at login
    CSRF_TOKEN_TTL_MINUTES: int = 60
    CSRF_HEADER_NAME: str = "X-CSRF-Token"

    # Background purge of expired tokens and rate-limit windows
    SWEEP_INTERVAL_SECONDS: float = 600.0

    # Fixed-window rate limits per endpoint class (max requests per window)
    RATE_LIMIT_LOGIN_MAX: int = 5
    RATE_LIMIT_LOGIN_WINDOW_MINUTES: int = 15
    RATE_LIMIT_SIGNUP_MAX: int = 3
    RATE_LIMIT_SIGNUP_WINDOW_MINUTES: int = 60
    RATE_LIMIT_PASSWORD_CHANGE_MAX: int = 5
    RATE_LIMIT_PASSWORD_CHANGE_WINDOW_MINUTES: int = 60

    # When False, note routes use the stored role of the resolved user instead of
    # the role asserted by the client.
    TRUST_CLIENT_ROLE: bool = True

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite URL (e.g. postgresql:// or sqlite:///)"
            )
        return v.strip()

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError("API_PREFIX must start with '/' (e.g. /api)")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 15:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 15")
        return v

    @field_validator("LOCKOUT_THRESHOLD")
    @classmethod
    def validate_lockout_threshold(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("LOCKOUT_THRESHOLD must be between 1 and 100")
        return v

    @field_validator("LOCKOUT_MINUTES", "CSRF_TOKEN_TTL_MINUTES")
    @classmethod
    def validate_duration_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError("Durations must be between 1 and 10080 minutes (1 min to 7 days)")
        return v

    @field_validator("CSRF_HEADER_NAME")
    @classmethod
    def validate_csrf_header_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("CSRF_HEADER_NAME must be set and non-empty")
        return v.strip()

    @field_validator("SWEEP_INTERVAL_SECONDS")
    @classmethod
    def validate_sweep_interval(cls, v: float) -> float:
        if v <= 0 or v > 86400:
            raise ValueError(
                "SWEEP_INTERVAL_SECONDS must be greater than 0 and at most 86400"
            )
        return v

    @field_validator(
        "RATE_LIMIT_LOGIN_MAX",
        "RATE_LIMIT_SIGNUP_MAX",
        "RATE_LIMIT_PASSWORD_CHANGE_MAX",
    )
    @classmethod
    def validate_rate_limit_max(cls, v: int) -> int:
        if v < 1 or v > 10000:
            raise ValueError("Rate limit maximums must be between 1 and 10000")
        return v

    @field_validator(
        "RATE_LIMIT_LOGIN_WINDOW_MINUTES",
        "RATE_LIMIT_SIGNUP_WINDOW_MINUTES",
        "RATE_LIMIT_PASSWORD_CHANGE_WINDOW_MINUTES",
    )
    @classmethod
    def validate_rate_limit_window(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError("Rate limit windows must be between 1 and 1440 minutes")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
