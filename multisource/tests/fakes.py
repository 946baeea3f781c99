"""Stand-ins for the LLM capability and helpers to build completion payloads."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from multisource.core.exceptions import ToolExecutionError
from multisource.mcp.base import Tool


def answer_response(text: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": text}}], "usage": {}}


def tool_call_response(
    name: str,
    arguments: dict[str, Any] | str,
    *,
    call_id: str = "call-1",
    content: str | None = None,
) -> dict[str, Any]:
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": content,
                    "tool_calls": [
                        {
                            "id": call_id,
                            "type": "function",
                            "function": {"name": name, "arguments": raw},
                        }
                    ],
                }
            }
        ],
        "usage": {},
    }


class ScriptedLLM:
    """Replays canned completions in order and records every request."""

    def __init__(self, *responses: dict[str, Any]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def queue(self, *responses: dict[str, Any]) -> None:
        self._responses.extend(responses)

    async def chat_completion(self, messages, *, tools=None, tool_choice=None):
        self.calls.append({"messages": list(messages), "tools": tools, "tool_choice": tool_choice})
        return self._responses.pop(0)


class LoopingLLM:
    """Requests the same tool call forever."""

    def __init__(self, name: str, arguments: dict[str, Any], content: str | None = None) -> None:
        self._name = name
        self._arguments = arguments
        self._content = content
        self.calls = 0

    async def chat_completion(self, messages, *, tools=None, tool_choice=None):
        self.calls += 1
        return tool_call_response(
            self._name, self._arguments, call_id=f"call-{self.calls}", content=self._content
        )


class BrokenLLM:
    async def chat_completion(self, messages, *, tools=None, tool_choice=None):
        raise RuntimeError("llm down")


class EchoInput(BaseModel):
    text: str


class EchoTool(Tool):
    name = "echo"
    description = "Echo the given text."
    input_model = EchoInput

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def run(self, params: EchoInput) -> dict[str, Any]:
        self.calls.append(params.text)
        return {"echo": params.text}


class FailingTool(Tool):
    name = "failing"
    description = "Always fails."
    input_model = EchoInput

    async def run(self, params: EchoInput) -> dict[str, Any]:
        raise ToolExecutionError("boom")
