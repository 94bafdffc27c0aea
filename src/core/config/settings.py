# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""KoolHub configuration.

Every value comes from the environment (or a ``.env`` file) through
pydantic-settings. Each concern has its own settings class with its own
variable prefix, and ``Settings`` nests them:

    DB_HOST=db.internal DB_PASSWORD=... JWT_SECRET_KEY=... SERVICE_MAX_PAGE_SIZE=50

Example:
    >>> from src.core.config.settings import get_settings
    >>> get_settings().service.default_page_size
    20
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-in-production"


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection for the single KoolHub database.

    Branches share the database; scoped tables carry a ``branch_id``.
    ``DATABASE_URL`` replaces the assembled URL entirely when set.
    """

    model_config = SettingsConfigDict(env_prefix="DB_", extra="ignore")

    user: str = "koolhub"
    password: SecretStr = SecretStr("koolhub_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "koolhub"
    url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def url(self) -> str:
        """asyncpg URL used by the API, the seeds and alembic."""
        if self.url_override:
            return self.url_override
        secret = self.password.get_secret_value()
        return (
            f"postgresql+asyncpg://{self.user}:{secret}@{self.host}:{self.port}/{self.database}"
        )


class JWTSettings(BaseSettings):
    """Bearer token signing. Tokens last a day unless configured otherwise."""

    model_config = SettingsConfigDict(env_prefix="JWT_", extra="ignore")

    secret_key: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )


class RateLimitSettings(BaseSettings):
    """Per-client request limits enforced by slowapi."""

    model_config = SettingsConfigDict(env_prefix="RATE_LIMIT_", extra="ignore")

    enabled: bool = True
    requests_per_minute: int = 120
    storage_uri: str = "memory://"


class CORSSettings(BaseSettings):
    """Browser origins allowed to call the API (comma-separated)."""

    model_config = SettingsConfigDict(env_prefix="CORS_", extra="ignore")

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """Bind address for ``koolhub-api``."""

    model_config = SettingsConfigDict(env_prefix="API_", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 5000


class ServiceSettings(BaseSettings):
    """Paging defaults and the deadline applied to each service operation.

    Attributes:
        default_page_size: Page size when a list call gives none (or an invalid one).
        max_page_size: Cap applied to any requested page size.
        operation_timeout_seconds: Deadline for one public service call.
    """

    model_config = SettingsConfigDict(env_prefix="SERVICE_", extra="ignore")

    default_page_size: int = 20
    max_page_size: int = 100
    operation_timeout_seconds: float = 10.0


class Settings(BaseSettings):
    """Root settings object returned by ``get_settings()``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)

    @model_validator(mode="after")
    def refuse_default_secret_in_production(self) -> Self:
        """Refuse to start production with the published JWT secret.

        Raises:
            ValueError: If ``JWT_SECRET_KEY`` was left at its default.
        """
        default_secret = self.jwt.secret_key.get_secret_value() == DEFAULT_JWT_SECRET
        if self.is_production and default_secret:
            raise ValueError(
                "JWT secret key must be changed from default in production. "
                "Set JWT_SECRET_KEY environment variable."
            )
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings read once per process; see ``clear_settings_cache``."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
