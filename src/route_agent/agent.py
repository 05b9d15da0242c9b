"""Agentic chat loop.

Each iteration sends the transcript and the tool catalog to the LLM. A
response without tool uses (or with ``stop_reason == "end_turn"``) ends
the turn. Otherwise every requested tool runs in order, its result is
appended to the transcript, and the loop continues until
``max_iterations`` is reached, at which point a fixed reply is returned.

The loop is a fold over ``TurnState``; the LLM is injected so tests can
script its responses.
"""

from __future__ import annotations

import time
from typing import Any, Sequence

from amap_service.logging import get_logger

from .dispatcher import ToolDispatcher
from .llm import LLMClient
from .prompts import BUDGET_EXHAUSTED_REPLY, MAP_ASSISTANT_SYSTEM
from .schemas import ChatMessage
from .settings import AgentSettings
from .state import ChatResult, ToolCallRecord, TraceRecord, TurnState
from .tools import build_anthropic_tools
from .trace import record_llm_call

logger = get_logger("agent")


class ChatError(RuntimeError):
    """The turn could not be completed (e.g. LLM provider unreachable)."""


class Agent:
    def __init__(self, settings: AgentSettings, llm: LLMClient) -> None:
        self._settings = settings
        self._llm = llm
        self._tools = build_anthropic_tools()

    async def run(
        self,
        messages: Sequence[ChatMessage],
        dispatcher: ToolDispatcher,
        *,
        session_id: str,
        trace_id: str,
        trace: TraceRecord | None = None,
    ) -> ChatResult:
        """Run one conversational turn through the tool-use loop."""
        state = TurnState(transcript=tuple({"role": m.role, "content": m.content} for m in messages))

        for iteration in range(1, self._settings.max_iterations + 1):
            response = await self._call_llm(state, iteration, trace_id, trace)
            tool_uses = [block for block in response.content if _block_type(block) == "tool_use"]

            if not tool_uses or response.stop_reason == "end_turn":
                text = "\n".join(block.text for block in response.content if _block_type(block) == "text")
                return ChatResult(
                    content=text,
                    map_data=state.map_data,
                    session_id=session_id,
                    trace_id=trace_id,
                    tool_calls=list(state.tool_calls),
                    iterations=iteration,
                )

            state = await self.apply_tool_uses(state, response.content, tool_uses, dispatcher)

        logger.info(
            "loop_budget_exhausted",
            extra={"extra": {"trace_id": trace_id, "iterations": state.iterations}},
        )
        return ChatResult(
            content=BUDGET_EXHAUSTED_REPLY,
            map_data=state.map_data,
            session_id=session_id,
            trace_id=trace_id,
            tool_calls=list(state.tool_calls),
            iterations=state.iterations,
            exhausted=True,
        )

    async def apply_tool_uses(
        self,
        state: TurnState,
        content: Sequence[Any],
        tool_uses: Sequence[Any],
        dispatcher: ToolDispatcher,
    ) -> TurnState:
        """One fold step: run the requested tools and extend the transcript."""
        map_data = state.map_data
        records: list[ToolCallRecord] = []
        tool_results: list[dict[str, Any]] = []

        # Sequential: results must line up with the requests.
        for block in tool_uses:
            args = dict(block.input or {})
            result = await dispatcher.execute(block.name, args)
            map_data = map_data.merge(result.map_data)
            records.append(
                ToolCallRecord(
                    name=block.name,
                    arguments=args,
                    ok=result.ok,
                    output=result.data if result.ok else None,
                    error=result.error.model_dump() if result.error else None,
                )
            )
            tool_result: dict[str, Any] = {
                "type": "tool_result",
                "tool_use_id": block.id,
                "content": result.llm_content(),
            }
            if not result.ok:
                tool_result["is_error"] = True
            tool_results.append(tool_result)

        assistant = {"role": "assistant", "content": [_block_param(block) for block in content]}
        user = {"role": "user", "content": tool_results}
        return state.advance([assistant, user], map_data, records)

    async def _call_llm(
        self,
        state: TurnState,
        iteration: int,
        trace_id: str,
        trace: TraceRecord | None,
    ) -> Any:
        start = time.time()
        try:
            response = await self._llm.create(
                system=MAP_ASSISTANT_SYSTEM,
                messages=list(state.transcript),
                tools=self._tools,
            )
        except Exception as exc:  # noqa: BLE001
            logger.info(
                "llm_error",
                extra={"extra": {"trace_id": trace_id, "iteration": iteration, "error": str(exc)}},
            )
            raise ChatError(f"LLM 调用失败: {exc}") from exc

        tool_uses = [
            {"name": block.name, "args": block.input}
            for block in response.content
            if _block_type(block) == "tool_use"
        ]
        logger.info(
            "llm_call",
            extra={
                "extra": {
                    "trace_id": trace_id,
                    "iteration": iteration,
                    "stop_reason": response.stop_reason,
                    "tool_uses": [t["name"] for t in tool_uses],
                    "latency_ms": int((time.time() - start) * 1000),
                }
            },
        )
        if trace is not None:
            record_llm_call(
                trace,
                model=getattr(self._llm, "model", self._settings.llm_model),
                iteration=iteration,
                stop_reason=response.stop_reason,
                tool_uses=tool_uses,
                transcript_len=len(state.transcript),
            )
        return response


def _block_type(block: Any) -> str | None:
    return getattr(block, "type", None)


def _block_param(block: Any) -> dict[str, Any]:
    """Convert a response content block back into a request param."""
    kind = _block_type(block)
    if kind == "text":
        return {"type": "text", "text": block.text}
    if kind == "tool_use":
        return {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
    # Thinking and other block kinds are echoed back as-is.
    return block.model_dump(exclude_none=True)
