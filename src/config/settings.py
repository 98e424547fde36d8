"""Application settings and configuration."""

import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

MIN_SECRET_LENGTH = 32
ALLOWED_JWT_ALGORITHMS = {"HS256", "HS384", "HS512"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application (hardcoded constants)
    app_name: str = "Session Auth Service"
    app_version: str = "0.1.0"

    # Environment-specific settings
    environment: str = "development"  # development, staging, production

    # Database
    database_url: str
    database_pool_size: int = 10
    database_max_overflow: int = 20
    database_pool_timeout: int = 30
    database_pool_recycle: int = 3600
    database_echo: bool = False

    # API
    api_prefix: str = "/api/v1"

    # CORS
    cors_allow_origins: str | None = None

    # Security
    jwt_access_secret: str
    jwt_refresh_secret: str
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "auth-service"
    access_token_expire_minutes: int = 15
    refresh_token_expire_minutes: int = 7 * 24 * 60

    # Background cleanup of expired sessions
    session_cleanup_interval_seconds: int = 3600

    # Rate limiting
    rate_limit_enabled: bool = True
    auth_rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"development", "staging", "production"}
        env = str(v).lower()
        if env not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}, got {env}")
        return env

    @field_validator("jwt_access_secret", "jwt_refresh_secret")
    @classmethod
    def validate_secret_length(cls, v: str, info) -> str:
        """Signing secrets must be long enough for HMAC."""
        if len(v) < MIN_SECRET_LENGTH:
            raise ValueError(f"{info.field_name} must be at least {MIN_SECRET_LENGTH} characters (current: {len(v)})")
        return v

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only symmetric HMAC algorithms are supported."""
        algorithm = v.upper()
        if algorithm not in ALLOWED_JWT_ALGORITHMS:
            raise ValueError(f"Invalid JWT algorithm: {v} (must be one of {sorted(ALLOWED_JWT_ALGORITHMS)})")
        return algorithm

    @field_validator("jwt_issuer")
    @classmethod
    def validate_jwt_issuer(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("jwt_issuer is required")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level == "WARN":
            level = "WARNING"
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = str(v).lower()
        if fmt not in {"json", "text"}:
            raise ValueError(f"Invalid log format: {v} (must be json or text)")
        return fmt

    @model_validator(mode="after")
    def validate_token_settings(self) -> "Settings":
        """Cross-field checks on the token configuration.

        Raises:
            ValueError: If secrets are shared or expiry windows are inconsistent.

        """
        if self.jwt_access_secret == self.jwt_refresh_secret:
            raise ValueError("jwt_access_secret and jwt_refresh_secret must be different")
        if self.access_token_expire_minutes < 1:
            raise ValueError("access_token_expire_minutes must be at least 1 minute")
        if self.refresh_token_expire_minutes < 60:
            raise ValueError("refresh_token_expire_minutes must be at least 1 hour")
        if self.access_token_expire_minutes >= self.refresh_token_expire_minutes:
            raise ValueError("refresh_token_expire_minutes must be longer than access_token_expire_minutes")
        if self.is_production and self.access_token_expire_minutes > 60:
            raise ValueError("In production, access_token_expire_minutes must not exceed 60 minutes")
        if self.session_cleanup_interval_seconds < 1:
            raise ValueError("session_cleanup_interval_seconds must be positive")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins(self) -> list[str]:
        """Parse the comma-separated CORS origin list."""
        if not self.cors_allow_origins:
            return []
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


settings = Settings()  # type: ignore[call-arg]
