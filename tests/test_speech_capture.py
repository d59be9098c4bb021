from __future__ import annotations

from sellerops.speech.base import (
    EVENT_TYPES,
    RecognitionErrorEvent,
    RecognitionResultEvent,
    RecognitionSegment,
    RecognitionSource,
)
from sellerops.speech.capture import NO_SPEECH_MESSAGE, UNSUPPORTED_MESSAGE, SpeechCapture


class FakeSource(RecognitionSource):
    def __init__(self) -> None:
        super().__init__()
        self.starts = 0
        self.stops = 0

    def start(self) -> None:
        self.starts += 1

    def stop(self) -> None:
        self.stops += 1


def make_capture() -> tuple[FakeSource, SpeechCapture, list[str]]:
    source = FakeSource()
    emitted: list[str] = []
    capture = SpeechCapture(source, on_utterance=emitted.append)
    return source, capture, emitted


def result(index: int, *segments: tuple[str, bool]) -> RecognitionResultEvent:
    return RecognitionResultEvent(
        result_index=index,
        results=[RecognitionSegment(transcript=text, is_final=final) for text, final in segments],
    )


def test_start_without_source_reports_capability_error() -> None:
    capture = SpeechCapture(None)
    assert capture.start() is False
    assert capture.last_error == UNSUPPORTED_MESSAGE
    assert capture.state == "IDLE"


def test_listening_begins_on_source_acknowledgment() -> None:
    source, capture, _ = make_capture()
    assert capture.start() is True
    assert source.starts == 1
    assert capture.listening is False

    source.emit("start")
    assert capture.listening is True
    assert capture.state == "LISTENING"


def test_concurrent_start_is_ignored() -> None:
    source, capture, _ = make_capture()
    capture.start()
    assert capture.start() is False
    source.emit("start")
    assert capture.start() is False
    assert source.starts == 1


def test_interim_replaces_previous_buffer() -> None:
    source, capture, emitted = make_capture()
    capture.start()
    source.emit("start")

    source.emit("result", result(0, ("show me", False)))
    assert capture.interim_text == "show me"
    source.emit("result", result(0, ("show me my", False)))
    assert capture.interim_text == "show me my"
    assert emitted == []


def test_final_segment_emits_once_and_clears_interim() -> None:
    source, capture, emitted = make_capture()
    capture.start()
    source.emit("start")

    source.emit("result", result(0, ("list my Amazon orders", True), (" and", False)))

    assert emitted == ["list my Amazon orders"]
    assert capture.interim_text == ""


def test_only_segments_from_result_index_are_processed() -> None:
    source, capture, emitted = make_capture()
    capture.start()
    source.emit("start")

    source.emit("result", result(1, ("already handled", True), (" new words ", True)))

    assert emitted == ["new words"]


def test_whitespace_final_emits_nothing() -> None:
    source, capture, emitted = make_capture()
    capture.start()
    source.emit("start")
    source.emit("result", result(0, ("   ", True), ("pending", False)))
    assert emitted == []
    assert capture.interim_text == "pending"


def test_stop_discards_interim_text() -> None:
    source, capture, emitted = make_capture()
    capture.start()
    source.emit("start")
    source.emit("result", result(0, ("half a thought", False)))

    capture.stop()

    assert source.stops == 1
    assert capture.state == "IDLE"
    assert capture.interim_text == ""
    assert emitted == []


def test_end_returns_to_idle_and_allows_restart() -> None:
    source, capture, _ = make_capture()
    capture.start()
    source.emit("start")
    source.emit("end")
    assert capture.state == "IDLE"
    assert capture.start() is True
    assert source.starts == 2


def test_no_speech_error_is_translated() -> None:
    source, capture, _ = make_capture()
    capture.start()
    source.emit("start")
    source.emit("error", RecognitionErrorEvent(error="no-speech"))
    assert capture.last_error == NO_SPEECH_MESSAGE
    assert capture.state == "IDLE"
    assert capture.start() is True


def test_other_error_codes_pass_through() -> None:
    source, capture, _ = make_capture()
    capture.start()
    source.emit("error", RecognitionErrorEvent(error="audio-capture"))
    assert capture.last_error == "audio-capture"

    source.emit("error", RecognitionErrorEvent(error=""))
    assert capture.last_error == "Voice input failed."


def test_start_acknowledgment_clears_previous_error() -> None:
    source, capture, _ = make_capture()
    capture.start()
    source.emit("error", RecognitionErrorEvent(error="no-speech"))
    capture.start()
    source.emit("start")
    assert capture.last_error is None


def test_one_listener_per_event_and_close_removes_all() -> None:
    source, capture, emitted = make_capture()
    capture.attach()
    for event_type in EVENT_TYPES:
        assert source.listener_count(event_type) == 1

    capture.close()
    capture.close()
    for event_type in EVENT_TYPES:
        assert source.listener_count(event_type) == 0

    source.emit("result", result(0, ("ignored", True)))
    assert emitted == []


def test_interim_observer_sees_changes() -> None:
    source = FakeSource()
    seen: list[str] = []
    capture = SpeechCapture(source, on_interim=seen.append)
    capture.start()
    source.emit("start")
    source.emit("result", result(0, ("hel", False)))
    source.emit("result", result(0, ("hello", True)))
    assert seen[-2:] == ["hel", ""]


def test_result_payload_from_browser_message() -> None:
    event = RecognitionResultEvent.from_payload(
        {"resultIndex": 1, "results": [{"isFinal": True, "transcript": "a"}, {"isFinal": False, "transcript": "b"}]}
    )
    assert event.result_index == 1
    assert [(s.transcript, s.is_final) for s in event.results] == [("a", True), ("b", False)]
