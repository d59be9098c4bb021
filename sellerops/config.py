from __future__ import annotations

import functools
from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseModel):
    api_key: str | None = None
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    temperature: float = 0.6
    timeout_sec: float = 60.0
    history_window: int = 6

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class SpeechSettings(BaseModel):
    auto_speak: bool = True
    recognition_lang: str = "en-IN"


class TelemetrySettings(BaseModel):
    log_level: str = "INFO"


class UISettings(BaseModel):
    origin: str = "http://localhost:3000"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env", ".env.local"), env_file_encoding="utf-8", extra="ignore")

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_TEMPERATURE: float = 0.6
    OPENAI_TIMEOUT_SEC: float = 60.0
    HISTORY_WINDOW: int = 6
    AUTO_SPEAK: bool = True
    RECOGNITION_LANG: str = "en-IN"
    LOG_LEVEL: str = "INFO"
    UI_ORIGIN: str = "http://localhost:3000"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    @property
    def llm(self) -> LLMSettings:
        return LLMSettings(
            api_key=self.OPENAI_API_KEY,
            model=self.OPENAI_MODEL,
            base_url=self.OPENAI_BASE_URL,
            temperature=self.OPENAI_TEMPERATURE,
            timeout_sec=self.OPENAI_TIMEOUT_SEC,
            history_window=self.HISTORY_WINDOW,
        )

    @property
    def speech(self) -> SpeechSettings:
        return SpeechSettings(auto_speak=self.AUTO_SPEAK, recognition_lang=self.RECOGNITION_LANG)

    @property
    def telemetry(self) -> TelemetrySettings:
        return TelemetrySettings(log_level=self.LOG_LEVEL)

    @property
    def ui(self) -> UISettings:
        return UISettings(origin=self.UI_ORIGIN)


@functools.lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    return AppSettings()


__all__ = ["AppSettings", "load_settings"]
