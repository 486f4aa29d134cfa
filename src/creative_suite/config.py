"""
Lightweight config loader.

- Loads environment variables from .env at module import.
- Provides a simple Settings wrapper around os.environ with sane defaults.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env once (project root .env)
load_dotenv(Path(__file__).resolve().parents[2] / ".env")


def _env(key: str, default: str | None = None) -> str | None:
    return os.environ.get(key, default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def _env_int(key: str, default: int) -> int:
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def _env_list(key: str, default: list[str] | None = None, sep: str = ",") -> list[str]:
    val = os.environ.get(key)
    if val is None:
        return default or []
    return [item.strip() for item in val.split(sep) if item.strip()]


class Settings:
    """Thin wrapper over os.environ with defaults and helpers."""

    def __init__(self) -> None:
        # App
        self.app_name: str = _env("APP_NAME", "creative-suite") or "creative-suite"
        self.environment: str = _env("ENVIRONMENT", "development") or "development"
        self.debug: bool = _env_bool("DEBUG", False)
        self.host: str = _env("HOST", "127.0.0.1") or "127.0.0.1"
        self.port: int = _env_int("PORT", 8000)

        # Gemini
        self.gemini_api_key: str | None = _env("GEMINI_API_KEY") or _env("API_KEY")
        self.video_model: str = _env("VIDEO_MODEL", "veo-3.1-fast-generate-preview") or "veo-3.1-fast-generate-preview"
        self.image_model: str = _env("IMAGE_MODEL", "gemini-2.5-flash-image") or "gemini-2.5-flash-image"
        self.script_model: str = _env("SCRIPT_MODEL", "gemini-2.5-flash") or "gemini-2.5-flash"
        self.tts_model: str = _env("TTS_MODEL", "gemini-2.5-flash-preview-tts") or "gemini-2.5-flash-preview-tts"
        self.tts_voice_name: str = _env("TTS_VOICE_NAME", "Kore") or "Kore"

        # Video polling
        self.video_poll_interval: float = _env_float("VIDEO_POLL_INTERVAL_SECONDS", 10.0)
        # 0 or unset means poll until the remote reports completion
        self.video_poll_max_attempts: int = _env_int("VIDEO_POLL_MAX_ATTEMPTS", 0)

        # Audio playback
        self.audio_sample_rate: int = _env_int("AUDIO_SAMPLE_RATE", 24000)
        self.audio_channels: int = _env_int("AUDIO_CHANNELS", 1)

        # SiliconFlow proxy
        self.siliconflow_api_key: str | None = _env("SILICONFLOW_API_KEY")
        self.siliconflow_base_url: str = (
            _env("SILICONFLOW_BASE_URL", "https://api.siliconflow.cn") or "https://api.siliconflow.cn"
        )
        self.proxy_max_payload_mb: int = _env_int("PROXY_MAX_PAYLOAD_MB", 50)

        # HTTP
        self.upstream_timeout: float = _env_float("UPSTREAM_TIMEOUT_SECONDS", 60.0)
        self.allowed_origins: list[str] = _env_list("ALLOWED_ORIGINS", ["*"])

        # Logging
        self.log_level: str = _env("LOG_LEVEL", "INFO") or "INFO"
        self.log_file: str | None = _env("LOG_FILE")

    # Derived helpers
    @property
    def proxy_max_payload_bytes(self) -> int:
        return self.proxy_max_payload_mb * 1024 * 1024

    @property
    def poll_max_attempts(self) -> int | None:
        return self.video_poll_max_attempts if self.video_poll_max_attempts > 0 else None

    @property
    def siliconflow_root(self) -> str:
        return self.siliconflow_base_url.rstrip("/")

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def get_settings() -> Settings:
    return Settings()
