from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal


RecognitionEventType = Literal["start", "result", "end", "error"]

EVENT_TYPES: tuple[RecognitionEventType, ...] = ("start", "result", "end", "error")


@dataclass(slots=True)
class RecognitionSegment:
    transcript: str
    is_final: bool = False


@dataclass(slots=True)
class RecognitionResultEvent:
    """Batch of segments; only those from ``result_index`` onward are new."""

    result_index: int
    results: Sequence[RecognitionSegment]

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RecognitionResultEvent":
        segments = [
            RecognitionSegment(
                transcript=str(item.get("transcript") or ""),
                is_final=bool(item.get("isFinal", item.get("is_final", False))),
            )
            for item in payload.get("results") or []
            if isinstance(item, dict)
        ]
        index = payload.get("resultIndex", payload.get("result_index", 0))
        return cls(result_index=int(index or 0), results=segments)


@dataclass(slots=True)
class RecognitionErrorEvent:
    error: str = ""


@dataclass(slots=True)
class RecognitionSession:
    listening: bool = False
    interim_text: str = ""
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"listening": self.listening, "interimText": self.interim_text, "lastError": self.last_error}


Listener = Callable[..., None]


class RecognitionSource:
    """Start/stop-controllable speech recognition event source.

    Subclasses implement ``start``/``stop`` and call ``emit`` with ``start``,
    ``result`` (a RecognitionResultEvent), ``end`` and ``error`` (a
    RecognitionErrorEvent) events.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    @property
    def available(self) -> bool:
        return True

    def start(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    def add_listener(self, event_type: RecognitionEventType, listener: Listener) -> None:
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown recognition event: {event_type}")
        self._listeners[event_type].append(listener)

    def remove_listener(self, event_type: RecognitionEventType, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event_type: RecognitionEventType) -> int:
        return len(self._listeners.get(event_type, []))

    def emit(self, event_type: RecognitionEventType, event: Any = None) -> None:
        for listener in list(self._listeners.get(event_type, [])):
            if event_type in ("start", "end"):
                listener()
            else:
                listener(event)


__all__ = [
    "EVENT_TYPES",
    "RecognitionErrorEvent",
    "RecognitionEventType",
    "RecognitionResultEvent",
    "RecognitionSegment",
    "RecognitionSession",
    "RecognitionSource",
]
