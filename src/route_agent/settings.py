"""Agent server configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from amap_service.adapters import ConfigError

ENV_FILE = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(ENV_FILE, override=False)


class AgentSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ROUTE_AGENT_", env_file=str(ENV_FILE), extra="ignore")

    host: str = "0.0.0.0"
    port: int = 7002

    # Any Anthropic messages-compatible endpoint; MiniMax by default.
    llm_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("MINIMAX_API_KEY", "ANTHROPIC_API_KEY", "ROUTE_AGENT_LLM_API_KEY"),
    )
    llm_base_url: str | None = "https://api.minimaxi.com/anthropic"
    llm_model: str = "MiniMax-M2.1"
    max_tokens: int = 4096
    llm_timeout_s: float = 60.0

    max_iterations: int = Field(default=5, ge=1)
    route_poi_limit: int = Field(default=5, ge=1, le=50)
    session_capacity: int = Field(default=256, ge=1)

    mock_llm: bool = False
    trace_enabled: bool = True
    trace_dir: str = "traces"

    def require_llm_key(self) -> str:
        if not self.llm_api_key:
            raise ConfigError("MINIMAX_API_KEY is not set")
        return self.llm_api_key


@lru_cache(maxsize=1)
def get_settings() -> AgentSettings:
    return AgentSettings()
