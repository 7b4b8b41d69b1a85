"""
Haven Application Settings

Configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(env_prefix="HAVEN_DB_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="haven_db", description="Database name")
    user: str = Field(default="haven_user", description="Database user")
    password: SecretStr = Field(default=SecretStr("dev_password"), description="Database password")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    max_overflow: int = Field(default=20, ge=0, le=100, description="Max overflow connections")
    url: Optional[str] = Field(
        default=None,
        description="Full async database URL; overrides host/port/name when set",
    )

    @property
    def async_url(self) -> str:
        """Generate async database URL for SQLAlchemy."""
        if self.url:
            return self.url
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"

    @property
    def sync_url(self) -> str:
        """Generate sync database URL for Alembic migrations."""
        password = self.password.get_secret_value()
        return f"postgresql://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class SessionTokenSettings(BaseSettings):
    """Portal session token configuration."""

    model_config = SettingsConfigDict(env_prefix="HAVEN_TOKEN_")

    secret_key: SecretStr = Field(
        default=SecretStr("dev_session_secret_key_not_for_production"),
        description="Session token signing secret",
    )
    algorithm: str = Field(default="HS256", description="Signing algorithm")
    expire_minutes: int = Field(default=720, ge=5, le=10080)


class IdentityProviderSettings(BaseSettings):
    """
    External identity provider configuration.

    The provider signs identity assertions with a shared secret;
    the portal only verifies them.
    """

    model_config = SettingsConfigDict(env_prefix="HAVEN_IDP_")

    issuer: str = Field(default="https://id.haven.local", description="Expected assertion issuer")
    audience: str = Field(default="haven-portal", description="Expected assertion audience")
    shared_secret: SecretStr = Field(
        default=SecretStr("dev_idp_shared_secret_not_for_production"),
        description="Assertion verification secret",
    )
    algorithm: str = Field(default="HS256")


class ComplianceSettings(BaseSettings):
    """Audit trail and session timeout configuration."""

    model_config = SettingsConfigDict(env_prefix="HAVEN_COMPLIANCE_")

    session_timeout_minutes: int = Field(default=30, ge=1, le=1440)
    audit_log_enabled: bool = Field(default=True)
    access_history_limit: int = Field(default=100, ge=1, le=1000)
    trust_proxy_headers: bool = Field(
        default=False,
        description="Trust X-Forwarded-For (only behind a reverse proxy)",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with HAVEN_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.

    Usage:
        settings = get_settings()
        db_url = settings.database.async_url
    """

    model_config = SettingsConfigDict(
        env_prefix="HAVEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins"
    )
    seed_on_startup: bool = Field(
        default=False,
        description="Insert starter prompts and resources when their tables are empty",
    )
    sentry_dsn: str = Field(default="", description="Sentry DSN (empty disables error tracking)")

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    token: SessionTokenSettings = Field(default_factory=SessionTokenSettings)
    identity: IdentityProviderSettings = Field(default_factory=IdentityProviderSettings)
    compliance: ComplianceSettings = Field(default_factory=ComplianceSettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, use dependency injection to override.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
