"""Capability contract shared by every agent tool."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ValidationError

from ..core.exceptions import InvalidToolInputError


class Tool(ABC):
    """A named, schema-described capability the orchestrator may invoke.

    Subclasses declare ``name``, ``description`` and a pydantic ``input_model``
    and implement :meth:`run`. Failures are raised as ``ToolExecutionError``
    subclasses so the orchestrator can surface them as observations.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    input_model: ClassVar[type[BaseModel]]

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema()

    def parse_input(self, arguments: Mapping[str, Any]) -> BaseModel:
        try:
            return self.input_model.model_validate(dict(arguments))
        except ValidationError as exc:
            fields = ", ".join(
                ".".join(str(part) for part in error["loc"]) or "input" for error in exc.errors()
            )
            raise InvalidToolInputError(f"Invalid input for {self.name}: {fields}") from exc

    async def invoke(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Validate ``arguments`` against the input model and run the tool."""

        return await self.run(self.parse_input(arguments))

    @abstractmethod
    async def run(self, params: Any) -> dict[str, Any]:
        """Execute the tool with validated parameters."""

    def to_openai_tool(self) -> dict[str, Any]:
        """Function-calling schema entry for the chat completions API."""

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }
