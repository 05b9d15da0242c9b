"""Per-request trace recording for replaying chat turns."""

from __future__ import annotations

import json
import os
import time
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .state import TraceRecord


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_trace(trace_id: str, session_id: str, messages: list[dict[str, Any]]) -> TraceRecord:
    trace = TraceRecord(trace_id=trace_id, started_at=now_utc_iso())
    trace.request = {
        "session_id": session_id,
        "message_count": len(messages),
        "last_user_message": next(
            (m["content"] for m in reversed(messages) if m.get("role") == "user"),
            None,
        ),
    }
    return trace


def record_llm_call(
    trace: TraceRecord,
    *,
    model: str,
    iteration: int,
    stop_reason: str | None,
    tool_uses: list[dict[str, Any]],
    transcript_len: int,
) -> None:
    trace.llm.append(
        {
            "model": model,
            "iteration": iteration,
            "stop_reason": stop_reason,
            "tool_uses": tool_uses,
            "transcript_len": transcript_len,
        }
    )


def record_tool_call(
    trace: TraceRecord,
    *,
    tool_name: str,
    args: dict[str, Any],
    ok: bool,
    latency_ms: int | None,
    error: dict[str, Any] | None,
    map_kinds: list[str],
) -> None:
    trace.tools.append(
        {
            "tool_name": tool_name,
            "args": args,
            "status": "ok" if ok else "error",
            "latency_ms": latency_ms,
            "error": error,
            "map_kinds": map_kinds,
        }
    )


def record_final(trace: TraceRecord, answer_text: str, *, iterations: int, exhausted: bool) -> None:
    trace.final = {
        "answer_text": answer_text,
        "iterations": iterations,
        "exhausted": exhausted,
    }


def finalize_trace(trace: TraceRecord, started_at_ts: float) -> None:
    trace.finished_at = now_utc_iso()
    trace.latency_ms = int((time.time() - started_at_ts) * 1000)


def write_trace(trace: TraceRecord, trace_dir: str) -> Path:
    os.makedirs(trace_dir, exist_ok=True)
    ts = trace.started_at.replace(":", "-")
    path = Path(trace_dir) / f"{ts}_{trace.trace_id}.json"
    path.write_text(json.dumps(asdict(trace), ensure_ascii=False, indent=2, default=str), encoding="utf-8")
    return path
