"""Shared type definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class AgentStep:
    """One iteration of the decision loop: the tool called and what it returned."""

    tool_name: str
    tool_input: Mapping[str, Any]
    observation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool_name": self.tool_name,
            "tool_input": dict(self.tool_input),
            "observation": self.observation,
        }


@dataclass(slots=True, frozen=True)
class QueryResult:
    """Outcome of one orchestrated query."""

    answer: str
    steps: tuple[AgentStep, ...] = ()
    success: bool = True
    duration_ms: int = 0
    error: str | None = None


@dataclass(slots=True, frozen=True)
class FinalAnswer:
    """LLM decision: answer the user directly."""

    text: str


@dataclass(slots=True, frozen=True)
class ToolCall:
    """LLM decision: invoke a tool with structured input."""

    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    call_id: str | None = None
    arguments_error: str | None = None


Decision = FinalAnswer | tuple[ToolCall, ...]
