"""OpenAI chat completions client used as the agent's decision capability."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterable

from openai import APIError as OpenAIError
from openai import AsyncOpenAI

from ...core.config import AgentSettings, get_settings, require_llm_credentials
from ...core.exceptions import ExternalServiceError
from ...core.logging_config import get_logger
from ..schemas.chat import ChatMessage

logger = get_logger(__name__)


class LLMClient:
    """Thin wrapper around the OpenAI-compatible chat completions API."""

    def __init__(self, settings: AgentSettings) -> None:
        api_key = require_llm_credentials(settings)
        self._model = settings.openai_model
        self._temperature = settings.openai_temperature
        self._max_tokens = settings.openai_max_tokens
        base_url = str(settings.openai_api_base).rstrip("/")
        logger.info(
            "llm_client_init",
            base_url=base_url,
            model=self._model,
            api_key_masked=f"{api_key[:4]}***{api_key[-4:]}",
        )
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def chat_completion(
        self,
        messages: Iterable[ChatMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: dict[str, Any] | str | None = None,
    ) -> dict[str, Any]:
        """Issue a chat completion request and return the response as a dict."""

        payload_messages = [message.model_dump(exclude_none=True) for message in messages]
        logger.debug(
            "llm_chat_request",
            message_count=len(payload_messages),
            tool_count=len(tools or []),
            tool_choice=tool_choice or "none",
        )

        options: dict[str, Any] = {}
        if tools:
            options["tools"] = tools
            options["tool_choice"] = tool_choice or "auto"
            options["parallel_tool_calls"] = False

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=payload_messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                **options,
            )
        except OpenAIError as exc:  # pragma: no cover - network path
            logger.error(
                "llm_sdk_error",
                error_type=type(exc).__name__,
                message=str(exc),
            )
            raise ExternalServiceError(f"OpenAI SDK error: {exc}") from exc

        return response.model_dump()


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient(get_settings())
