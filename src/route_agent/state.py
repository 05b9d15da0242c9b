"""Request and session state containers."""

from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Any

from amap_service.schemas import RouteResult

from .schemas import MapData


@dataclass
class TraceRecord:
    """Structured trace container for a single request."""

    trace_id: str
    started_at: str
    finished_at: str | None = None
    latency_ms: int | None = None
    request: dict[str, Any] = field(default_factory=dict)
    llm: list[dict[str, Any]] = field(default_factory=list)
    tools: list[dict[str, Any]] = field(default_factory=list)
    final: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolCallRecord:
    name: str
    arguments: dict[str, Any]
    ok: bool
    output: Any | None = None
    error: dict[str, Any] | None = None


@dataclass
class RouteSession:
    """Per-conversation state read by the route-relative POI tool."""

    session_id: str
    current_route: RouteResult | None = None


class SessionStore:
    """Bounded in-memory LRU of route sessions."""

    def __init__(self, capacity: int = 256) -> None:
        self._capacity = capacity
        self._sessions: OrderedDict[str, RouteSession] = OrderedDict()
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str | None) -> RouteSession:
        with self._lock:
            if session_id and session_id in self._sessions:
                self._sessions.move_to_end(session_id)
                return self._sessions[session_id]
            session = RouteSession(session_id=session_id or str(uuid.uuid4()))
            self._sessions[session.session_id] = session
            while len(self._sessions) > self._capacity:
                self._sessions.popitem(last=False)
            return session

    def __len__(self) -> int:
        return len(self._sessions)


@dataclass(frozen=True)
class TurnState:
    """Value folded over loop iterations.

    ``transcript`` holds Anthropic-format message params.
    """

    transcript: tuple[dict[str, Any], ...]
    map_data: MapData = field(default_factory=MapData)
    tool_calls: tuple[ToolCallRecord, ...] = ()
    iterations: int = 0

    def advance(
        self,
        messages: list[dict[str, Any]],
        map_data: MapData,
        tool_calls: list[ToolCallRecord],
    ) -> "TurnState":
        return replace(
            self,
            transcript=self.transcript + tuple(messages),
            map_data=map_data,
            tool_calls=self.tool_calls + tuple(tool_calls),
            iterations=self.iterations + 1,
        )


@dataclass
class ChatResult:
    content: str
    map_data: MapData
    session_id: str
    trace_id: str
    tool_calls: list[ToolCallRecord] = field(default_factory=list)
    iterations: int = 0
    exhausted: bool = False
