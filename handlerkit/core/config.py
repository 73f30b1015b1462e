"""core/config.py — Application configuration via Pydantic BaseSettings.

Loads HANDLERKIT_* environment variables from .env (and the OS environment).
Import `settings` from this module wherever configuration is needed.

Usage:
    from handlerkit.core.config import settings

    if settings.response_style == "simple":
        ...
"""

from __future__ import annotations

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HANDLERKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "handlerkit"
    environment: str = "development"

    # Logging: durations use Go-style strings ("24h", "90m", "1h30m")
    log_level: str = "DEBUG"
    log_dir: str = "logs"
    log_rotate_time: str = "24h"
    log_max_age: str = "72h"
    log_to_console: bool = True

    # Which ResponseAdaptor create_app() builds its default Handler with
    response_style: Literal["standard", "simple"] = "standard"

    # CORS
    allowed_origins: list[str] = [
        "http://localhost:5173",   # Vite dev server
        "http://localhost:3000",
    ]

    @field_validator("log_level", mode="before")
    @classmethod
    def _uppercase_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Singleton, import this everywhere
settings = Settings()
