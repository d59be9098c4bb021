from __future__ import annotations

from collections.abc import Callable
from typing import Literal

from sellerops.speech.base import (
    RecognitionErrorEvent,
    RecognitionResultEvent,
    RecognitionSession,
    RecognitionSource,
)
from sellerops.telemetry.logging import get_logger

CaptureState = Literal["IDLE", "LISTENING"]

UNSUPPORTED_MESSAGE = "Voice recognition is not supported on this device."
NO_SPEECH_MESSAGE = "I could not hear you."
GENERIC_ERROR_MESSAGE = "Voice input failed."


def describe_error(code: str | None) -> str:
    if code == "no-speech":
        return NO_SPEECH_MESSAGE
    return code or GENERIC_ERROR_MESSAGE


class SpeechCapture:
    """Turns recognition events into finalized utterances.

    One listener per event type is registered on ``attach`` and all of them are
    removed on ``close``. Each ``start()`` yields at most one listening session;
    the source is expected to run non-continuously.
    """

    def __init__(
        self,
        source: RecognitionSource | None,
        on_utterance: Callable[[str], object] | None = None,
        on_interim: Callable[[str], None] | None = None,
    ) -> None:
        self._source = source
        self._on_utterance = on_utterance
        self._on_interim = on_interim
        self._session = RecognitionSession()
        self._start_pending = False
        self._attached = False
        self._logger = get_logger(__name__)
        self.attach()

    @property
    def session(self) -> RecognitionSession:
        return self._session

    @property
    def state(self) -> CaptureState:
        return "LISTENING" if self._session.listening else "IDLE"

    @property
    def listening(self) -> bool:
        return self._session.listening

    @property
    def interim_text(self) -> str:
        return self._session.interim_text

    @property
    def last_error(self) -> str | None:
        return self._session.last_error

    @property
    def supported(self) -> bool:
        return self._source is not None and self._source.available

    def set_handler(self, on_utterance: Callable[[str], object] | None) -> None:
        self._on_utterance = on_utterance

    def attach(self) -> None:
        if self._attached or self._source is None:
            return
        self._source.add_listener("start", self._handle_start)
        self._source.add_listener("result", self._handle_result)
        self._source.add_listener("end", self._handle_end)
        self._source.add_listener("error", self._handle_error)
        self._attached = True

    def close(self) -> None:
        if not self._attached or self._source is None:
            return
        self._source.remove_listener("start", self._handle_start)
        self._source.remove_listener("result", self._handle_result)
        self._source.remove_listener("end", self._handle_end)
        self._source.remove_listener("error", self._handle_error)
        self._attached = False

    def start(self) -> bool:
        if not self.supported:
            self._session = RecognitionSession(last_error=UNSUPPORTED_MESSAGE)
            self._logger.warning("speech.capture.unsupported")
            return False
        if self._session.listening or self._start_pending:
            self._logger.debug("speech.capture.start_ignored", listening=self._session.listening)
            return False
        self._start_pending = True
        self._source.start()
        return True

    def stop(self) -> None:
        self._start_pending = False
        if self._source is not None and self._source.available:
            self._source.stop()
        self._reset(last_error=self._session.last_error)
        self._logger.debug("speech.capture.stop")

    def clear_interim(self) -> None:
        self._set_interim("")

    def _handle_start(self) -> None:
        self._start_pending = False
        self._session = RecognitionSession(listening=True)
        self._notify_interim()
        self._logger.info("speech.capture.listening")

    def _handle_result(self, event: RecognitionResultEvent) -> None:
        interim = ""
        final_text = ""
        for segment in list(event.results)[max(event.result_index, 0) :]:
            if segment.is_final:
                final_text += segment.transcript
            else:
                interim += segment.transcript

        self._set_interim(interim)

        final_text = final_text.strip()
        if not final_text:
            return
        self._set_interim("")
        self._logger.info("speech.capture.final", chars=len(final_text))
        if self._on_utterance is not None:
            self._on_utterance(final_text)

    def _handle_end(self) -> None:
        self._start_pending = False
        self._reset(last_error=self._session.last_error)
        self._logger.debug("speech.capture.end")

    def _handle_error(self, event: RecognitionErrorEvent) -> None:
        self._start_pending = False
        message = describe_error(event.error if event is not None else None)
        self._reset(last_error=message)
        self._logger.warning("speech.capture.error", code=getattr(event, "error", None), message=message)

    def _reset(self, last_error: str | None = None) -> None:
        had_interim = bool(self._session.interim_text)
        self._session = RecognitionSession(last_error=last_error)
        if had_interim:
            self._notify_interim()

    def _set_interim(self, text: str) -> None:
        if text == self._session.interim_text:
            return
        self._session.interim_text = text
        self._notify_interim()

    def _notify_interim(self) -> None:
        if self._on_interim is not None:
            self._on_interim(self._session.interim_text)


__all__ = ["SpeechCapture", "describe_error"]
