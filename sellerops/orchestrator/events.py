from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal
from uuid import uuid4

Role = Literal["user", "assistant"]

State = Literal["IDLE", "LISTENING", "COMPOSING", "SPEAKING"]


@dataclass(frozen=True, slots=True)
class Utterance:
    """One attributed line of the conversation."""

    role: Role
    content: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: str(uuid4()))

    @classmethod
    def create(cls, role: Role, text: str) -> "Utterance":
        content = (text or "").strip()
        if not content:
            raise ValueError("Utterance content must not be blank")
        return cls(role=role, content=content)

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
        }


__all__ = ["Role", "State", "Utterance"]
