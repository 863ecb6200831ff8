from __future__ import annotations

from functools import lru_cache

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    database_url: str = Field(default="", validation_alias="DATABASE_URL")
    database_host: str = Field(default="localhost", validation_alias="DATABASE_HOST")
    database_port: int = Field(default=5432, validation_alias="DATABASE_PORT")
    database_name: str = Field(default="athlete_base", validation_alias="DATABASE_NAME")
    database_user: str = Field(default="postgres", validation_alias="DATABASE_USER")
    database_password: str = Field(default="", validation_alias="DATABASE_PASSWORD")
    database_ssl: bool = Field(default=False, validation_alias="DATABASE_SSL")

    database_max_connections: int = Field(default=20, validation_alias="DATABASE_MAX_CONNECTIONS")
    database_min_connections: int = Field(default=2, validation_alias="DATABASE_MIN_CONNECTIONS")
    database_idle_timeout_ms: int = Field(default=30000, validation_alias="DATABASE_IDLE_TIMEOUT")
    database_connection_timeout_ms: int = Field(default=2000, validation_alias="DATABASE_CONNECTION_TIMEOUT")
    database_statement_timeout_ms: int = Field(default=10000, validation_alias="DATABASE_STATEMENT_TIMEOUT")

    bcrypt_rounds: int = Field(default=10, validation_alias="BCRYPT_ROUNDS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    allowed_origins: str = Field(default="http://localhost:3000", validation_alias="ALLOWED_ORIGINS")  # Comma-separated list
    environment: str = Field(default="development", validation_alias="APP_ENV")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        """Keep bcrypt cost inside the range passlib accepts without stalling requests."""
        if value < 4 or value > 15:
            logger.warning(f"BCRYPT_ROUNDS={value} is out of range 4..15, clamping")
            return min(max(value, 4), 15)
        return value

    @field_validator(
        "database_max_connections",
        "database_idle_timeout_ms",
        "database_connection_timeout_ms",
        "database_statement_timeout_ms",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> Settings:
        """Clamp the minimum pool size into [0, max]."""
        if self.database_min_connections < 0:
            self.database_min_connections = 0
        if self.database_min_connections > self.database_max_connections:
            logger.warning(
                f"DATABASE_MIN_CONNECTIONS={self.database_min_connections} exceeds "
                f"DATABASE_MAX_CONNECTIONS={self.database_max_connections}, using the maximum"
            )
            self.database_min_connections = self.database_max_connections
        return self

    @property
    def sqlalchemy_url(self) -> str:
        """Connection URL, preferring an explicit DATABASE_URL over the host fields."""
        if self.database_url:
            return self.database_url
        url = URL.create(
            "postgresql+asyncpg",
            username=self.database_user,
            password=self.database_password or None,
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
        )
        return url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url.lower().startswith("sqlite")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
