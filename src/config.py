from __future__ import annotations

from functools import cache
from typing import Literal, get_args

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)


class AppSettings(BaseSettings):
    log_level: LogLevel = "WARNING"
    log_format: str = "%(levelname)s %(name)s: %(message)s"
    skip_malformed_rows: bool = False

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


@cache
def config() -> AppSettings:
    return AppSettings()
