from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from sellerops.llm.heuristic import build_heuristic_response
from sellerops.llm.response_schema import response_format
from sellerops.llm.types import ChatProvider, FallbackReason, GenerationResult, StructuredResponse
from sellerops.orchestrator.events import Utterance
from sellerops.persona import SYSTEM_PROMPT
from sellerops.telemetry.logging import get_logger

HistoryEntry = Utterance | Mapping[str, str]


@dataclass
class AssistantClient:
    """Asks the remote model once and falls back to the heuristic responder.

    With no provider configured the heuristic answers directly. There is no
    retry: a failed attempt is answered locally so a turn never waits on more
    than one remote call.
    """

    provider: ChatProvider | None = None
    history_window: int = 6

    def __post_init__(self) -> None:
        self._logger = get_logger(__name__)

    async def respond_with_source(self, message: str, history: Iterable[HistoryEntry] = ()) -> GenerationResult:
        message = message.strip()
        if self.provider is None:
            self._logger.debug("llm.client.offline", prompt_len=len(message))
            return self._fallback(message, "not_configured")

        messages = self.build_messages(message, history)
        try:
            content = await self.provider.complete(messages, response_format())
        except httpx.HTTPStatusError as exc:
            self._logger.warning(
                "llm.client.http_status",
                provider=self.provider.name,
                status=exc.response.status_code,
            )
            return self._fallback(message, "http_status")
        except (httpx.HTTPError, ValueError) as exc:
            self._logger.warning("llm.client.transport_error", provider=self.provider.name, error=str(exc))
            return self._fallback(message, "transport_error")

        if not content:
            self._logger.warning("llm.client.empty_content", provider=self.provider.name)
            return self._fallback(message, "empty_content")

        try:
            payload = json.loads(content)
        except (json.JSONDecodeError, TypeError) as exc:
            self._logger.warning("llm.client.invalid_json", provider=self.provider.name, error=str(exc))
            return self._fallback(message, "invalid_json")

        try:
            response = StructuredResponse.model_validate(payload)
        except ValidationError as exc:
            self._logger.warning(
                "llm.client.schema_mismatch",
                provider=self.provider.name,
                errors=exc.error_count(),
            )
            return self._fallback(message, "schema_mismatch")

        self._logger.info(
            "llm.client.response",
            provider=self.provider.name,
            prompt_len=len(message),
            history=len(messages) - 2,
        )
        return GenerationResult(response=response, source="model")

    def build_messages(self, message: str, history: Iterable[HistoryEntry]) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = [{"role": "system", "content": SYSTEM_PROMPT}]
        messages.extend(self.trim_history(history))
        messages.append({"role": "user", "content": message})
        return messages

    def trim_history(self, history: Iterable[HistoryEntry]) -> list[dict[str, str]]:
        entries: list[dict[str, str]] = []
        for entry in history:
            if isinstance(entry, Utterance):
                entries.append(entry.to_message())
                continue
            role = entry.get("role")
            content = entry.get("content")
            if role in ("user", "assistant") and content and content.strip():
                entries.append({"role": role, "content": content})
        if self.history_window <= 0:
            return []
        return entries[-self.history_window :]

    def _fallback(self, message: str, reason: FallbackReason) -> GenerationResult:
        if reason != "not_configured":
            self._logger.info("llm.client.fallback", reason=reason)
        return GenerationResult(
            response=build_heuristic_response(message),
            source="heuristic",
            fallback_reason=reason,
        )

    async def aclose(self) -> None:
        if self.provider is not None:
            await self.provider.aclose()


__all__ = ["AssistantClient"]
