"""Mapping service configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .adapters import ConfigError

ENV_FILE = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(ENV_FILE, override=False)


class AmapSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AMAP_SERVICE_", env_file=str(ENV_FILE), extra="ignore")

    host: str = "0.0.0.0"
    port: int = 7001

    amap_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AMAP_API_KEY", "AMAP_SERVICE_AMAP_API_KEY"),
    )
    request_timeout_s: float = 10.0

    def require_api_key(self) -> str:
        if not self.amap_api_key:
            raise ConfigError("AMAP_API_KEY is not set")
        return self.amap_api_key


@lru_cache(maxsize=1)
def get_settings() -> AmapSettings:
    return AmapSettings()
