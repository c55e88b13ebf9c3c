"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.

Settings are validated once at startup. Any invalid or missing value aborts
the process with a single ConfigurationError listing every offending field.
"""

import re
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import AnyHttpUrl, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_DURATION_PATTERN = re.compile(r"^(\d+)\s*([smhd]?)$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class ConfigurationError(RuntimeError):
    """Raised when environment variables fail validation."""


def parse_duration(value: str) -> int:
    """Convert a duration string such as "15m", "1h" or "900" into seconds.

    Raises:
        ValueError: If the value is not a positive duration
    """
    match = _DURATION_PATTERN.match(str(value).strip().lower())
    if not match:
        raise ValueError(f"invalid duration {value!r}, expected e.g. '15m', '1h', '900s'")
    seconds = int(match.group(1)) * _DURATION_UNITS[match.group(2)]
    if seconds <= 0:
        raise ValueError("duration must be positive")
    return seconds


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Environment Variables:
        ENVIRONMENT: development | test | production
        DATABASE_URL: SQLAlchemy connection string (required)
        JWT_ACCESS_SECRET: Access token signing key, min 24 chars (required)
        JWT_REFRESH_SECRET: Refresh token signing key, min 24 chars (required)
        JWT_ACCESS_TTL: Access token lifetime, e.g. "15m"
        JWT_REFRESH_TTL_DAYS: Refresh token lifetime in days
        PASSWORD_PEPPER: Password hashing pepper (required)
        APP_BASE_URL / APP_BASE_URLS: Browser origins allowed by CORS
        API_BASE_URL: Public base URL of this API
        S3_*: S3-compatible object storage for media uploads
        REDIS_URL: Enables login rate limiting when set
        LOG_LEVEL / LOG_JSON: Logging setup
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    PORT: int = 4000
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    MAX_BODY_BYTES: int = 5 * 1024 * 1024

    # Database
    DATABASE_URL: str = Field(..., min_length=1)

    # Security
    JWT_ACCESS_SECRET: str = Field(..., min_length=24)
    JWT_REFRESH_SECRET: str = Field(..., min_length=24)
    JWT_ACCESS_TTL: str = "15m"
    JWT_REFRESH_TTL_DAYS: int = Field(30, gt=0)
    JWT_ALGORITHM: str = "HS256"
    PASSWORD_PEPPER: str = Field(..., min_length=16)

    # Public URLs
    APP_BASE_URL: AnyHttpUrl = "http://localhost:5173"
    APP_BASE_URLS: Optional[str] = None
    API_BASE_URL: AnyHttpUrl = "http://localhost:4000"

    # Object Storage (S3/MinIO)
    S3_ENDPOINT: Optional[AnyHttpUrl] = None
    S3_REGION: str = "us-east-1"
    S3_BUCKET: str = "uaetrail-assets"
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None
    S3_FORCE_PATH_STYLE: bool = True

    # Rate Limiting
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_MAX_ATTEMPTS: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 900  # 15 minutes
    LOCKOUT_THRESHOLD: int = 10
    LOCKOUT_DURATION_SECONDS: int = 1800  # 30 minutes

    @field_validator("JWT_ACCESS_TTL")
    @classmethod
    def validate_access_ttl(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator("S3_ENDPOINT", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY", "REDIS_URL", "APP_BASE_URLS", mode="before")
    @classmethod
    def empty_string_as_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def access_token_ttl_seconds(self) -> int:
        return parse_duration(self.JWT_ACCESS_TTL)

    @property
    def cors_origins(self) -> List[str]:
        """Configured browser origins, normalised without trailing slash."""
        origins = [str(self.APP_BASE_URL)]
        if self.APP_BASE_URLS:
            origins.extend(part for part in self.APP_BASE_URLS.split(",") if part.strip())
        normalised = []
        for origin in origins:
            origin = origin.strip().rstrip("/")
            if origin not in normalised:
                normalised.append(origin)
        return normalised

    @property
    def api_base_url(self) -> str:
        return str(self.API_BASE_URL).rstrip("/")

    @property
    def s3_endpoint(self) -> Optional[str]:
        return str(self.S3_ENDPOINT).rstrip("/") if self.S3_ENDPOINT else None

    @property
    def storage_configured(self) -> bool:
        return bool(self.S3_ENDPOINT and self.S3_ACCESS_KEY_ID and self.S3_SECRET_ACCESS_KEY)


def _format_validation_error(exc: ValidationError) -> str:
    issues = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ())) or "settings"
        issues.append(f"{path}: {error.get('msg')}")
    return ", ".join(issues)


def load_settings(**overrides) -> Settings:
    """Build a Settings instance, converting validation failures.

    Raises:
        ConfigurationError: If any environment variable is invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid environment variables: {_format_validation_error(exc)}"
        ) from exc


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return load_settings()
