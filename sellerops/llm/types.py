from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ResponseSource = Literal["model", "heuristic"]

FallbackReason = Literal[
    "not_configured",
    "transport_error",
    "http_status",
    "empty_content",
    "invalid_json",
    "schema_mismatch",
]


class StructuredResponse(BaseModel):
    """Reply contract shared by the remote model and the heuristic generator."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    reply: str
    summary: str | None = None
    follow_ups: list[str] | None = Field(default=None, alias="followUps")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(slots=True)
class GenerationResult:
    response: StructuredResponse
    source: ResponseSource
    fallback_reason: FallbackReason | None = None


class ChatProvider:
    name: str

    async def complete(self, messages: list[dict[str, str]], response_format: dict[str, Any]) -> str | None:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


__all__ = ["ChatProvider", "FallbackReason", "GenerationResult", "ResponseSource", "StructuredResponse"]
