"""Pytest configuration and fixtures."""

import pytest

from creative_suite.codec import SelectedFile
from creative_suite.config import Settings
from fakes import PNG_BYTES, FakeGenAIClient, ScriptedCreativeClient

ENV_KEYS = (
    "GEMINI_API_KEY",
    "API_KEY",
    "SILICONFLOW_API_KEY",
    "SILICONFLOW_BASE_URL",
    "VIDEO_POLL_INTERVAL_SECONDS",
    "VIDEO_POLL_MAX_ATTEMPTS",
    "PROXY_MAX_PAYLOAD_MB",
    "LOG_FILE",
    "ALLOWED_ORIGINS",
    "AUDIO_SAMPLE_RATE",
    "AUDIO_CHANNELS",
    "TTS_VOICE_NAME",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the settings read so tests start from defaults."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def settings(clean_env):
    """Settings with a Gemini key, a SiliconFlow key and no poll delay."""
    clean_env.setenv("GEMINI_API_KEY", "test-gemini-key")
    clean_env.setenv("SILICONFLOW_API_KEY", "test-sf-key")
    clean_env.setenv("SILICONFLOW_BASE_URL", "https://sf.test")
    clean_env.setenv("VIDEO_POLL_INTERVAL_SECONDS", "0")
    return Settings()


@pytest.fixture
def png_file():
    return SelectedFile(filename="product.png", mime_type="image/png", data=PNG_BYTES)


@pytest.fixture
def text_file():
    return SelectedFile(filename="notes.txt", mime_type="text/plain", data=b"hello")


@pytest.fixture
def fake_genai():
    return FakeGenAIClient()


@pytest.fixture
def scripted_client():
    return ScriptedCreativeClient()
