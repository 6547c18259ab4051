# config.py
"""
Global configuration for gemchat.

Usage (preferred):
    import config as cfg
    s = cfg.settings
    print(s.gemini_model)

Override via env vars (prefix GEMCHAT_, case-insensitive), e.g.:
  GEMCHAT_LOG_LEVEL=debug
  GEMCHAT_GEMINI_MODEL=gemini-2.5-flash
  GEMCHAT_CORS_ALLOW_ORIGINS='["http://localhost:3000"]'
  GEMCHAT_SERVER_HOST=0.0.0.0
  GEMCHAT_SERVER_PORT=8000
  GEMCHAT_GRADIO_AUTO_OPEN=true

API keys are also read from the plain GEMINI_API_KEY / DEEPGRAM_API_KEY names.
"""
from __future__ import annotations

import os
from typing import List, Optional, Literal
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["debug", "info", "warning", "error", "critical"]


class Settings(BaseSettings):
    # Logging
    log_level: LogLevel = "info"

    # ---- Generation service (Gemini) ----
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMCHAT_GEMINI_API_KEY", "GEMINI_API_KEY"),
    )
    gemini_model: str = "gemini-2.5-flash"

    # ---- Transcription service (Deepgram) ----
    deepgram_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMCHAT_DEEPGRAM_API_KEY", "DEEPGRAM_API_KEY"),
    )
    deepgram_url: str = "https://api.deepgram.com/v1/listen"
    deepgram_model: str = "nova-2"
    deepgram_language: str = "en-US"

    # Upload guard for /api/transcribe
    max_upload_mb: int = 50

    # Outbound HTTP timeout (Deepgram, and the UI -> backend client)
    http_timeout_sec: float = 60.0

    # CORS (dev-friendly; restrict in prod). Supports JSON list via env.
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Uvicorn access logs (HTTP request lines)
    uvicorn_access_log: bool = False

    # ---- Server / Gradio UI ----
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    # Base URL the UI uses to reach the API; None -> derived from host/port
    server_url: Optional[str] = None
    gradio_analytics_enabled: bool = False
    gradio_mount_path: str = "/ui"
    gradio_auto_open: bool = True
    gradio_open_delay_sec: float = 1.0
    ui_poll_interval_sec: float = 0.5

    # ---- Microphone capture ----
    sample_rate: int = 16_000
    chunk: int = 1024
    # None -> system default input device
    input_device_index: Optional[int] = None

    # ---- Speech output ----
    # None -> engine default rate
    tts_rate: Optional[int] = None
    tts_volume: float = 1.0
    tts_voice_preference: List[str] = Field(
        default_factory=lambda: ["Google", "Natural", "en-US", "en_US", "English"]
    )

    # ---- Voice interaction ----
    voice_cues: bool = True
    submit_delay_sec: float = 1.0

    # ---- Persistent data ----
    data_dir: str = "data"
    db_filename: str = "gemchat.sqlite3"
    db_wal: bool = True
    storage_key: str = "chats"

    model_config = SettingsConfigDict(
        env_prefix="GEMCHAT_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def db_path(self) -> str:
        # Resolve to absolute path and ensure folder exists when accessed
        path = os.path.abspath(os.path.join(self.data_dir, self.db_filename))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        return path

    @property
    def api_base_url(self) -> str:
        if self.server_url:
            return self.server_url.rstrip("/")
        host = "127.0.0.1" if self.server_host in ("0.0.0.0", "::") else self.server_host
        return f"http://{host}:{self.server_port}"

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, v: str) -> LogLevel:
        vv = str(v).lower().strip()
        return vv if vv in {"debug", "info", "warning", "error", "critical"} else "info"  # type: ignore[return-value]

    @field_validator("gemini_api_key", "deepgram_api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, v: str | None) -> Optional[str]:
        if v is None:
            return None
        vv = str(v).strip()
        return vv or None

    @field_validator("tts_volume", mode="before")
    @classmethod
    def _clamp_volume(cls, v) -> float:
        try:
            f = float(v)
        except (TypeError, ValueError):
            return 1.0
        return min(1.0, max(0.0, f))


# Single global instance
settings = Settings()
