"""
Request logger configuration using Pydantic Settings.
Loaded once from environment variables and shared read-only by every request.
"""

import logging
from functools import lru_cache
from typing import Annotated, Dict, FrozenSet

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

NOT_AVAILABLE = "N/A"

# Severity labels accepted for request records
LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def normalize_level(label: str) -> str:
    """Return the canonical lower-case label, raising ValueError if unknown."""
    key = str(label).strip().lower()
    if key not in LEVELS:
        raise ValueError(
            f"Unknown log level {label!r}; expected one of {sorted(LEVELS)}"
        )
    return "warning" if key == "warn" else key


def level_number(label: str) -> int:
    return LEVELS[normalize_level(label)]


class Settings(BaseSettings):
    """
    Process-wide settings for the JSON request logger.
    Frozen after construction so concurrent requests can read it without locking.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # --- Static record fields ---
    APP_NAME: str = NOT_AVAILABLE
    APP_ENV: str = NOT_AVAILABLE
    SERVER_NAME: str = NOT_AVAILABLE

    # --- Request records ---
    REQUEST_LOG_LEVEL: str = "info"
    FILTERED_KEYS: Annotated[FrozenSet[str], NoDecode] = frozenset()
    MAX_BODY_BYTES: int = Field(default=64 * 1024, ge=0)

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @field_validator("REQUEST_LOG_LEVEL")
    @classmethod
    def validate_request_log_level(cls, v: str) -> str:
        return normalize_level(v)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return normalize_level(v).upper()

    @field_validator("FILTERED_KEYS", mode="before")
    @classmethod
    def parse_filtered_keys(cls, v: str | list | set | frozenset) -> FrozenSet[str]:
        if isinstance(v, str):
            return frozenset(k.strip() for k in v.split(",") if k.strip())
        return frozenset(v)

    @property
    def log_level_number(self) -> int:
        return level_number(self.LOG_LEVEL)

    @property
    def is_json_logging(self) -> bool:
        return self.LOG_FORMAT.lower() == "json"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor for the process-wide settings."""
    return Settings()
