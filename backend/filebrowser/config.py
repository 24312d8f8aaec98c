"""Application configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DATA_PATH = Path.cwd() / "Data"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_path: Path = Field(..., description="Root directory served by the browser")
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=5000, ge=1, le=65535)

    @field_validator("data_path", mode="before")
    @classmethod
    def _normalize_data_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("FILE_MANAGER_DATA_PATH must not be empty")
        return Path(value).expanduser().resolve()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings from the environment."""
    values: dict[str, str] = {
        "data_path": os.getenv("FILE_MANAGER_DATA_PATH", str(DEFAULT_DATA_PATH)),
    }
    origins = os.getenv("FILE_MANAGER_CORS_ORIGINS")
    if origins is not None:
        values["cors_origins"] = origins
    log_level = os.getenv("FILE_MANAGER_LOG_LEVEL")
    if log_level:
        values["log_level"] = log_level
    host = os.getenv("FILE_MANAGER_HOST")
    if host:
        values["host"] = host
    port = os.getenv("FILE_MANAGER_PORT")
    if port:
        values["port"] = port
    return Settings(**values)


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
