from __future__ import annotations

import asyncio
from typing import Protocol

from sellerops.telemetry.logging import get_logger


class SpeechBackend(Protocol):
    async def speak(self, text: str) -> None: ...

    async def cancel(self) -> None: ...


class Speaker:
    """Fire-and-forget speech output; a new utterance cancels the pending one."""

    def __init__(self, backend: SpeechBackend | None = None) -> None:
        self._backend = backend
        self._pending: asyncio.Task[None] | None = None
        self._logger = get_logger(__name__)

    @property
    def available(self) -> bool:
        return self._backend is not None

    def speak(self, text: str) -> asyncio.Task[None] | None:
        text = text.strip()
        if not text:
            return None
        if self._backend is None:
            self._logger.warning("speech.output.unavailable")
            return None
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._run(text))
        return self._pending

    async def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        if self._backend is not None:
            await self._backend.cancel()

    async def _run(self, text: str) -> None:
        assert self._backend is not None
        try:
            await self._backend.cancel()
            await self._backend.speak(text)
            self._logger.debug("speech.output.spoken", chars=len(text))
        except asyncio.CancelledError:
            self._logger.debug("speech.output.cancelled")
            raise
        except Exception:
            self._logger.exception("speech.output.failed")


__all__ = ["SpeechBackend", "Speaker"]
