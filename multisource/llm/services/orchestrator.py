"""Decision loop: ask the LLM, run the tool it picks, feed the observation back."""

from __future__ import annotations

import json
import time
from typing import Any, Mapping, Protocol

from ...core.exceptions import ToolExecutionError, UnknownToolError
from ...core.logging_config import get_logger
from ...core.messages import get_string
from ...core.types import AgentStep, Decision, FinalAnswer, QueryResult, ToolCall
from ...mcp.registry import ToolRegistry
from ...mcp.tools.utils import to_observation
from ..schemas.chat import ChatMessage

logger = get_logger(__name__)

DEFAULT_MAX_ITERATIONS = 10

_SYSTEM_PROMPT = """You are {agent_name}, an AI assistant that answers questions using multiple data sources.

You have access to the following tools:

1. **sqlite_query**: query SQLite databases in the data/sqlite folder
2. **document_search**: search text documents in the data/documents folder
3. **bash_command**: run shell commands to obtain external data (may be disabled)

IMPORTANT INSTRUCTIONS:

- Analyse the user's question to decide which tool fits best
- For structured data, use sqlite_query
- For questions about document contents, use document_search
- To fetch external data or run system commands, use bash_command
- Combine information from several sources when needed
- If a tool reports an error, adjust your input or try another source
- If you are unsure which tool to use, explain your reasoning to the user
- {answer_language}

Be helpful and precise, and always explain how you obtained the information."""


class LLMCapability(Protocol):
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: dict[str, Any] | str | None = None,
    ) -> dict[str, Any]: ...


def parse_decision(message: Mapping[str, Any]) -> Decision:
    """Turn an assistant message into a final answer or the tool calls it requests."""

    tool_calls = message.get("tool_calls") or []
    if not tool_calls:
        return FinalAnswer(text=message.get("content") or "")
    return tuple(_parse_tool_call(tool_call) for tool_call in tool_calls)


def _parse_tool_call(tool_call: Mapping[str, Any]) -> ToolCall:
    function = tool_call.get("function") or {}
    name = function.get("name") or ""
    arguments_raw = function.get("arguments") or "{}"
    call_id = tool_call.get("id")

    if not isinstance(arguments_raw, str):
        arguments: Any = arguments_raw
    else:
        try:
            arguments = json.loads(arguments_raw)
        except json.JSONDecodeError as exc:
            # Some models append trailing text after the JSON object.
            try:
                arguments, _ = json.JSONDecoder().raw_decode(arguments_raw.strip())
            except json.JSONDecodeError:
                return ToolCall(
                    name=name, call_id=call_id, arguments_error=f"Invalid tool arguments: {exc}"
                )

    if not isinstance(arguments, dict):
        return ToolCall(
            name=name, call_id=call_id, arguments_error="Tool arguments must be a JSON object"
        )
    return ToolCall(name=name, arguments=arguments, call_id=call_id)


def _first_message(result: Mapping[str, Any]) -> dict[str, Any]:
    return (result.get("choices") or [{}])[0].get("message") or {}


def _elapsed_ms(started: float) -> int:
    return max(0, round((time.perf_counter() - started) * 1000))


class AgentOrchestrator:
    """Run one query through the tool-selection loop.

    Each call to :meth:`run` owns its own message list and step sequence, so
    concurrent queries share nothing but the read-only registry and the LLM
    client.
    """

    def __init__(
        self,
        llm: LLMCapability,
        registry: ToolRegistry,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        agent_name: str = "MultiSourceAgent",
        locale: str = "pt-BR",
    ) -> None:
        self._llm = llm
        self._registry = registry
        self._max_iterations = max_iterations
        self._agent_name = agent_name
        self._locale = locale

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    def system_prompt(self) -> str:
        return _SYSTEM_PROMPT.format(
            agent_name=self._agent_name,
            answer_language=get_string("answer_language", self._locale),
        )

    async def run(self, query: str) -> QueryResult:
        """Process ``query``; never raises, failures come back as ``success=False``."""

        started = time.perf_counter()
        steps: list[AgentStep] = []
        logger.info("agent_query_started", query_preview=query[:200])

        try:
            answer, success = await self._decision_loop(query, steps)
        except Exception as exc:
            logger.exception("agent_query_failed", query_preview=query[:200], steps=len(steps))
            return QueryResult(
                answer=get_string("query_failed", self._locale, error=exc),
                steps=tuple(steps),
                success=False,
                duration_ms=_elapsed_ms(started),
                error=str(exc),
            )

        duration_ms = _elapsed_ms(started)
        logger.info(
            "agent_query_completed",
            success=success,
            steps=len(steps),
            duration_ms=duration_ms,
        )
        return QueryResult(
            answer=answer,
            steps=tuple(steps),
            success=success,
            duration_ms=duration_ms,
        )

    async def _decision_loop(self, query: str, steps: list[AgentStep]) -> tuple[str, bool]:
        messages: list[ChatMessage] = [
            ChatMessage(role="system", content=self.system_prompt()),
            ChatMessage(role="user", content=query),
        ]
        tools_schema = self._registry.get_tools_schema()
        last_text = ""

        for iteration in range(1, self._max_iterations + 1):
            result = await self._llm.chat_completion(
                messages, tools=tools_schema, tool_choice="auto"
            )
            message = _first_message(result)
            decision = parse_decision(message)

            if isinstance(decision, FinalAnswer):
                logger.info("agent_final_answer", iteration=iteration)
                return decision.text, True

            content = message.get("content") or ""
            if content.strip():
                last_text = content
            messages.append(
                ChatMessage(
                    role="assistant",
                    content=message.get("content"),
                    tool_calls=message.get("tool_calls"),
                )
            )
            logger.info("agent_tool_calls_detected", iteration=iteration, tool_count=len(decision))

            for tool_call in decision:
                step = await self._execute(tool_call)
                steps.append(step)
                messages.append(
                    ChatMessage(
                        role="tool",
                        content=step.observation,
                        tool_call_id=tool_call.call_id,
                    )
                )

        logger.warning("agent_loop_maxed", max_iterations=self._max_iterations, steps=len(steps))
        answer = last_text or get_string(
            "max_iterations", self._locale, max_iterations=self._max_iterations
        )
        return answer, False

    async def _execute(self, tool_call: ToolCall) -> AgentStep:
        if tool_call.arguments_error:
            return AgentStep(
                tool_name=tool_call.name,
                tool_input=tool_call.arguments,
                observation=f"Error: {tool_call.arguments_error}",
            )

        try:
            tool = self._registry.get(tool_call.name)
            result = await tool.invoke(tool_call.arguments)
        except (UnknownToolError, ToolExecutionError) as exc:
            logger.warning(
                "tool_call_failed",
                tool=tool_call.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            observation = f"Error: {exc}"
        except Exception as exc:
            logger.exception("tool_call_crashed", tool=tool_call.name)
            observation = f"Error: {type(exc).__name__}: {exc}"
        else:
            observation = to_observation(result)
            logger.info(
                "tool_call_executed",
                tool=tool_call.name,
                arguments=dict(tool_call.arguments),
                result_summary=observation[:200],
            )

        return AgentStep(
            tool_name=tool_call.name,
            tool_input=tool_call.arguments,
            observation=observation,
        )
