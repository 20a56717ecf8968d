"""Environment-driven settings for the service and command line."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_GENERATOR, DEFAULT_MODULUS, ENV_PREFIX

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    """Settings read from ``DEVICEAUTH_*`` variables; init arguments win."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    generator: int = DEFAULT_GENERATOR
    modulus: int = DEFAULT_MODULUS
    store: Optional[str] = None
    check_primality: bool = False
    zero_means_unregistered: bool = False
    log_level: LogLevel = "WARNING"

    @field_validator("generator", "modulus", mode="before")
    @classmethod
    def _parse_int(cls, value: object) -> object:
        # Accept decimal or 0x-prefixed hex from the environment.
        if isinstance(value, str):
            return int(value, 0)
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.upper()
        return value


__all__ = ["LogLevel", "Settings"]
