"""Handler plumbing shared by the tool modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from amap_service.mapping import MapClient

from ..schemas import MapData
from ..settings import AgentSettings
from ..state import RouteSession


class ToolFailure(RuntimeError):
    """Expected tool-level failure reported back to the LLM."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class ToolContext:
    client: MapClient
    session: RouteSession
    settings: AgentSettings


@dataclass
class ToolOutput:
    data: Any
    map_data: MapData | None = None
