from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from sellerops.config import AppSettings, load_settings
from sellerops.llm.client import AssistantClient
from sellerops.llm.providers.openai import OpenAIProvider
from sellerops.orchestrator.session import ConversationSession
from sellerops.speech.capture import SpeechCapture
from sellerops.speech.synthesis import Speaker
from sellerops.telemetry.logging import configure_logging, get_logger
from sellerops.ui.recognition import BrowserRecognitionSource
from sellerops.ui.websocket import BrowserSpeechBackend, StateBridge

logger = get_logger(__name__)


class HistoryItem(BaseModel):
    role: str | None = None
    content: str | None = None


class AssistantRequest(BaseModel):
    message: str | None = None
    history: list[HistoryItem] = Field(default_factory=list)


class ChatRequest(BaseModel):
    text: str


class AutoSpeakRequest(BaseModel):
    enabled: bool


class VoiceRuntime:
    def __init__(self, settings: AppSettings) -> None:
        llm = settings.llm
        provider = None
        if llm.configured:
            provider = OpenAIProvider(
                api_key=llm.api_key or "",
                model=llm.model,
                base_url=llm.base_url,
                temperature=llm.temperature,
                timeout=llm.timeout_sec,
            )
        self.client = AssistantClient(provider=provider, history_window=llm.history_window)
        self.bridge = StateBridge()
        self.recognition = BrowserRecognitionSource(lang=settings.speech.recognition_lang)
        self.speaker = Speaker(BrowserSpeechBackend(self.bridge, lang=settings.speech.recognition_lang))
        self.session = ConversationSession(
            client=self.client,
            speaker=self.speaker,
            ui=self.bridge,
            auto_speak=settings.speech.auto_speak,
        )
        self.capture = SpeechCapture(self.recognition)
        self.session.attach_capture(self.capture)

    async def shutdown(self) -> None:
        await self.speaker.cancel()
        await self.session.aclose()
        await self.client.aclose()


def create_app(settings: AppSettings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.telemetry.log_level)

    runtime = VoiceRuntime(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await runtime.shutdown()

    app = FastAPI(title="SellerOps Voice Desk", lifespan=lifespan)
    app.state.runtime = runtime
    app.include_router(runtime.bridge.router)
    app.include_router(runtime.recognition.router)

    origins = {settings.ui.origin}
    if "localhost" in settings.ui.origin:
        origins.add(settings.ui.origin.replace("localhost", "127.0.0.1"))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(origins),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Assistant-Source", "X-Assistant-Fallback"],
        allow_credentials=True,
    )

    @app.post("/api/assistant")
    async def assistant_endpoint(request: AssistantRequest, response: Response) -> Any:
        message = (request.message or "").strip()
        if not message:
            return JSONResponse({"error": "Message is required."}, status_code=400)
        history = [
            {"role": item.role, "content": item.content}
            for item in request.history
            if item.role and item.content
        ]
        result = await runtime.client.respond_with_source(message, history)
        response.headers["X-Assistant-Source"] = result.source
        if result.fallback_reason:
            response.headers["X-Assistant-Fallback"] = result.fallback_reason
        logger.info("api.assistant", source=result.source, fallback_reason=result.fallback_reason)
        return result.response.to_payload()

    @app.post("/chat")
    async def chat_endpoint(request: ChatRequest) -> Any:
        if not request.text.strip():
            return JSONResponse({"error": "Message is required."}, status_code=400)
        if runtime.session.awaiting_response:
            return JSONResponse({"error": "Still working on the previous request."}, status_code=409)
        assistant = await runtime.session.submit(request.text)
        if assistant is None:
            return JSONResponse({"error": "Still working on the previous request."}, status_code=409)
        body: dict[str, Any] = {"message": assistant.to_dict()}
        if runtime.session.last_result is not None:
            body.update(runtime.session.last_result.response.to_payload())
            body["source"] = runtime.session.last_result.source
        return body

    @app.get("/chat/history")
    async def chat_history() -> dict[str, Any]:
        return {
            "messages": runtime.session.history.to_list(),
            "awaiting_response": runtime.session.awaiting_response,
        }

    @app.post("/chat/auto-speak")
    async def set_auto_speak(request: AutoSpeakRequest) -> dict[str, bool]:
        runtime.session.auto_speak = request.enabled
        if not request.enabled:
            await runtime.speaker.cancel()
        return {"auto_speak": runtime.session.auto_speak}

    @app.post("/voice/start")
    async def voice_start() -> dict[str, Any]:
        started = runtime.capture.start()
        return {"started": started, **runtime.capture.session.to_dict()}

    @app.post("/voice/stop")
    async def voice_stop() -> dict[str, Any]:
        runtime.capture.stop()
        return runtime.capture.session.to_dict()

    @app.get("/voice/state")
    async def voice_state() -> dict[str, Any]:
        return {
            "supported": runtime.capture.supported,
            "speech_output": runtime.speaker.available,
            "state": runtime.capture.state,
            **runtime.capture.session.to_dict(),
        }

    return app


__all__ = ["VoiceRuntime", "create_app"]
