from __future__ import annotations

from collections.abc import Iterator

from sellerops.orchestrator.events import Utterance


class ConversationHistory:
    """Append-only transcript. Only the trailing window is ever sent upstream."""

    def __init__(self) -> None:
        self._entries: list[Utterance] = []

    def append(self, utterance: Utterance) -> Utterance:
        self._entries.append(utterance)
        return utterance

    def tail(self, n: int) -> list[Utterance]:
        if n <= 0:
            return []
        return list(self._entries[-n:])

    def to_list(self) -> list[dict]:
        return [entry.to_dict() for entry in self._entries]

    def __iter__(self) -> Iterator[Utterance]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ConversationHistory"]
