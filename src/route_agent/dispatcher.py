"""Tool dispatch layer.

Turns an LLM tool-use request into a handler call and always returns a
``ToolResult``. Failures of a single call are reported as error-tagged
results so the conversation can continue; only configuration errors
escape.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import ValidationError

from amap_service.adapters import AdapterError, ConfigError
from amap_service.logging import get_logger
from amap_service.mapping import MapClient

from .schemas import ToolError, ToolMeta, ToolResult
from .settings import AgentSettings
from .state import RouteSession, TraceRecord
from .tools import TOOL_HANDLERS, TOOL_SPECS, ToolContext, ToolFailure, resolve_tool
from .trace import record_tool_call

logger = get_logger("dispatcher")


class ToolDispatcher:
    def __init__(
        self,
        settings: AgentSettings,
        client: MapClient,
        session: RouteSession,
        trace_id: str,
        trace: TraceRecord | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._session = session
        self._trace_id = trace_id
        self._trace = trace

    async def execute(self, name: str, args: dict[str, Any]) -> ToolResult:
        start = time.time()
        tool = resolve_tool(name)
        if tool is None:
            result = self._error(name, "NOT_FOUND", f"未知工具: {name}", start)
        else:
            spec = TOOL_SPECS[tool]
            handler = TOOL_HANDLERS[tool]
            context = ToolContext(client=self._client, session=self._session, settings=self._settings)
            try:
                payload = spec.input_model.model_validate(args)
                output = await handler(payload, context)
                result = ToolResult(
                    ok=True,
                    data=output.data,
                    map_data=output.map_data,
                    meta=self._meta(name, start),
                )
            except ConfigError:
                raise
            except ValidationError as exc:
                result = self._error(name, "INVALID_ARGUMENT", f"参数错误: {exc}", start)
            except ToolFailure as exc:
                result = self._error(name, exc.code, exc.message, start)
            except AdapterError as exc:
                result = self._error(name, exc.code, exc.message, start, exc.details)
            except Exception as exc:  # noqa: BLE001
                result = self._error(name, "TOOL_ERROR", str(exc) or type(exc).__name__, start)

        self._record(name, args, result)
        return result

    def _meta(self, name: str, start: float) -> ToolMeta:
        return ToolMeta(tool_name=name, trace_id=self._trace_id, latency_ms=int((time.time() - start) * 1000))

    def _error(
        self,
        name: str,
        code: str,
        message: str,
        start: float,
        details: dict[str, Any] | None = None,
    ) -> ToolResult:
        return ToolResult(
            ok=False,
            error=ToolError(code=code, message=message, details=details or None),
            meta=self._meta(name, start),
        )

    def _record(self, name: str, args: dict[str, Any], result: ToolResult) -> None:
        map_kinds = result.map_data.kinds() if result.map_data is not None else []
        logger.info(
            "tool_call",
            extra={
                "extra": {
                    "trace_id": self._trace_id,
                    "session_id": self._session.session_id,
                    "tool": name,
                    "ok": result.ok,
                    "latency_ms": result.meta.latency_ms,
                    "error_code": result.error.code if result.error else None,
                }
            },
        )
        if self._trace is not None:
            record_tool_call(
                self._trace,
                tool_name=name,
                args=args,
                ok=result.ok,
                latency_ms=result.meta.latency_ms,
                error=result.error.model_dump() if result.error else None,
                map_kinds=map_kinds,
            )
