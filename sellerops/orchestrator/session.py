from __future__ import annotations

import asyncio
from typing import Any, Protocol

from sellerops.llm.types import GenerationResult
from sellerops.orchestrator.events import State, Utterance
from sellerops.orchestrator.history import ConversationHistory
from sellerops.persona import STANDBY_REPLY, issue_reply
from sellerops.speech.capture import SpeechCapture
from sellerops.speech.synthesis import Speaker
from sellerops.telemetry.logging import get_logger


class ResponseClient(Protocol):
    history_window: int

    async def respond_with_source(self, message: str, history: list[Utterance]) -> GenerationResult: ...


class StatePublisher(Protocol):
    async def publish_state(self, state: State, payload: dict | None = None) -> None: ...


class ConversationSession:
    """Runs one round trip per accepted utterance, at most one at a time.

    A submission made while a reply is pending is dropped rather than queued.
    """

    def __init__(
        self,
        client: ResponseClient,
        speaker: Speaker | None = None,
        ui: StatePublisher | None = None,
        auto_speak: bool = True,
    ) -> None:
        self._client = client
        self._speaker = speaker
        self._ui = ui
        self._history = ConversationHistory()
        self._capture: SpeechCapture | None = None
        self._awaiting = False
        self._pending: set[asyncio.Task[Any]] = set()
        self._logger = get_logger(__name__)
        self.auto_speak = auto_speak
        self.draft = ""
        self.last_result: GenerationResult | None = None

    @property
    def history(self) -> ConversationHistory:
        return self._history

    @property
    def awaiting_response(self) -> bool:
        return self._awaiting

    def attach_capture(self, capture: SpeechCapture) -> None:
        self._capture = capture
        capture.set_handler(self.submit_nowait)

    async def submit(self, text: str) -> Utterance | None:
        accepted = self._accept(text)
        if accepted is None:
            return None
        message, window = accepted
        return await self._complete(message, window)

    def submit_nowait(self, text: str) -> asyncio.Task[Utterance] | None:
        accepted = self._accept(text)
        if accepted is None:
            return None
        message, window = accepted
        task = asyncio.get_running_loop().create_task(self._complete(message, window))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _accept(self, text: str) -> tuple[str, list[Utterance]] | None:
        message = (text or "").strip()
        if not message:
            return None
        if self._awaiting:
            self._logger.info("session.submit.rejected", reason="awaiting_response")
            return None

        window = self._history.tail(self._client.history_window)
        self._history.append(Utterance.create("user", message))
        self.draft = ""
        if self._capture is not None:
            self._capture.clear_interim()
        self._awaiting = True
        self.last_result = None
        self._logger.debug("session.submit.accepted", prompt_len=len(message), window=len(window))
        return message, window

    async def _complete(self, message: str, window: list[Utterance]) -> Utterance:
        try:
            await self._publish("COMPOSING", {"transcript": message})
            result = await self._client.respond_with_source(message, window)
        except Exception as exc:
            self._logger.error("session.turn.failed", error=str(exc), exc_info=True)
            assistant = self._history.append(Utterance.create("assistant", issue_reply(exc)))
            self._awaiting = False
            await self._publish("IDLE", {"message": assistant.to_dict(), "error": True})
            return assistant
        finally:
            self._awaiting = False

        self.last_result = result
        reply = result.response.reply.strip() or STANDBY_REPLY
        assistant = self._history.append(Utterance.create("assistant", reply))
        self._logger.info(
            "session.turn.complete",
            source=result.source,
            fallback_reason=result.fallback_reason,
            history=len(self._history),
        )

        payload = {"message": assistant.to_dict(), **result.response.to_payload(), "source": result.source}
        await self._publish("IDLE", payload)
        if self.auto_speak and self._speaker is not None:
            self._speaker.speak(reply)
        return assistant

    async def _publish(self, state: State, payload: dict) -> None:
        if self._ui is None:
            return
        try:
            await self._ui.publish_state(state, payload)
        except Exception as exc:
            self._logger.warning("session.publish.failed", state=state, error=str(exc))

    async def aclose(self) -> None:
        for task in list(self._pending):
            task.cancel()
        if self._capture is not None:
            self._capture.close()


__all__ = ["ConversationSession", "ResponseClient", "StatePublisher"]
