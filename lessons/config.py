"""Configuration management for the learning demos.

Only the demos and the logging setup read these values; the dispatcher
itself never looks at the environment. Uses pydantic-settings for env var
loading.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables (or a local ``.env``)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # JWT demos (JWTAuth, GinRouter)
    jwt_secret: str = "your-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 8

    # ORM demos
    database_url: str = "sqlite+pysqlite:///:memory:"
    sql_echo: bool = False

    # Logging for the CLI process
    log_level: str = "WARNING"

    # Multiplier for every sleep in the concurrency demos (0 disables them)
    delay_scale: float = 1.0

    # RateLimit demo
    rate_limit_per_window: int = 3
    rate_limit_window_s: float = 60.0

    # SwaggerSecurity demo: HTTP Basic credentials guarding /docs
    docs_username: str = "admin"
    docs_password: str = "docs-password"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return upper

    @field_validator("delay_scale")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("delay_scale must be >= 0")
        return value

    @field_validator("rate_limit_per_window")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("rate_limit_per_window must be >= 1")
        return value

    @field_validator("rate_limit_window_s")
    @classmethod
    def _positive_window(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("rate_limit_window_s must be > 0")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings (cached singleton)."""
    return Settings()
