from __future__ import annotations

import asyncio
import json
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from sellerops.speech.base import RecognitionErrorEvent, RecognitionResultEvent, RecognitionSource
from sellerops.telemetry.logging import get_logger


class BrowserRecognitionSource(RecognitionSource):
    """Relays Web Speech API events from a browser tab over ``/ws/recognition``.

    The most recently connected tab owns the microphone. ``start``/``stop`` are
    sent back to it as commands; its ``start``/``result``/``end``/``error``
    messages are re-emitted to listeners.
    """

    def __init__(self, lang: str = "en-IN") -> None:
        super().__init__()
        self._lang = lang
        self._socket: WebSocket | None = None
        self._sends: set[asyncio.Task[None]] = set()
        self._router = APIRouter()
        self._router.add_api_websocket_route("/ws/recognition", self._websocket_handler)
        self._logger = get_logger(__name__)

    @property
    def router(self) -> APIRouter:
        return self._router

    @property
    def available(self) -> bool:
        return self._socket is not None

    def config(self) -> dict[str, Any]:
        return {
            "lang": self._lang,
            "continuous": False,
            "interimResults": True,
            "maxAlternatives": 1,
        }

    def start(self) -> None:
        self._send({"command": "start", **self.config()})

    def stop(self) -> None:
        self._send({"command": "stop"})

    def dispatch(self, message: dict[str, Any]) -> None:
        kind = message.get("type")
        if kind == "start":
            self.emit("start")
        elif kind == "result":
            self.emit("result", RecognitionResultEvent.from_payload(message))
        elif kind == "end":
            self.emit("end")
        elif kind == "error":
            self.emit("error", RecognitionErrorEvent(error=str(message.get("error") or "")))
        else:
            self._logger.debug("ui.recognition.unknown_message", kind=kind)

    def _send(self, command: dict[str, Any]) -> None:
        socket = self._socket
        if socket is None:
            self._logger.warning("ui.recognition.no_client", command=command.get("command"))
            return
        task = asyncio.get_running_loop().create_task(self._deliver(socket, command))
        self._sends.add(task)
        task.add_done_callback(self._sends.discard)

    async def _deliver(self, socket: WebSocket, command: dict[str, Any]) -> None:
        try:
            await socket.send_json(command)
        except (RuntimeError, WebSocketDisconnect) as exc:
            self._logger.warning("ui.recognition.send_failed", error=str(exc))
            self.emit("error", RecognitionErrorEvent(error="network"))

    async def _websocket_handler(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._socket = websocket
        self._logger.info("ui.recognition.connected")
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    self._logger.warning("ui.recognition.bad_payload", size=len(raw))
                    continue
                if isinstance(message, dict):
                    self.dispatch(message)
        except WebSocketDisconnect:
            if self._socket is websocket:
                self._socket = None
                self.emit("end")
            self._logger.info("ui.recognition.disconnected")


__all__ = ["BrowserRecognitionSource"]
