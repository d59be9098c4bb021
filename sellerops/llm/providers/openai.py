from __future__ import annotations

from typing import Any

import httpx

from sellerops.llm.types import ChatProvider
from sellerops.telemetry.logging import get_logger


class OpenAIProvider(ChatProvider):
    """OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.6,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )
        self._model = model
        self._temperature = temperature
        self._logger = get_logger(__name__)
        self.name = "openai"

    async def complete(self, messages: list[dict[str, str]], response_format: dict[str, Any]) -> str | None:
        payload = {
            "model": self._model,
            "temperature": self._temperature,
            "response_format": response_format,
            "messages": messages,
        }
        resp = await self._client.post("/chat/completions", json=payload)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        if not isinstance(content, str):
            self._logger.debug("llm.openai.non_text_content", model=self._model, kind=type(content).__name__)
            return None
        self._logger.debug("llm.openai.completion", model=self._model, chars=len(content))
        return content or None

    async def aclose(self) -> None:
        await self._client.aclose()
