"""Tests for config module."""

from creative_suite.config import Settings


def test_defaults(clean_env):
    settings = Settings()

    assert settings.gemini_api_key is None
    assert settings.tts_voice_name == "Kore"
    assert settings.video_poll_interval == 10.0
    assert settings.poll_max_attempts is None
    assert settings.audio_sample_rate == 24000
    assert settings.audio_channels == 1
    assert settings.siliconflow_root == "https://api.siliconflow.cn"
    assert settings.proxy_max_payload_bytes == 50 * 1024 * 1024
    assert settings.allowed_origins == ["*"]


def test_api_key_fallback(clean_env):
    clean_env.setenv("API_KEY", "legacy-key")
    assert Settings().gemini_api_key == "legacy-key"

    clean_env.setenv("GEMINI_API_KEY", "gemini-key")
    assert Settings().gemini_api_key == "gemini-key"


def test_overrides(clean_env):
    clean_env.setenv("VIDEO_POLL_MAX_ATTEMPTS", "30")
    clean_env.setenv("SILICONFLOW_BASE_URL", "https://proxy.example/")
    clean_env.setenv("ALLOWED_ORIGINS", "http://localhost:3000, https://app.example")

    settings = Settings()

    assert settings.poll_max_attempts == 30
    assert settings.siliconflow_root == "https://proxy.example"
    assert settings.allowed_origins == ["http://localhost:3000", "https://app.example"]


def test_invalid_numbers_fall_back_to_defaults(clean_env):
    clean_env.setenv("VIDEO_POLL_INTERVAL_SECONDS", "soon")
    clean_env.setenv("AUDIO_SAMPLE_RATE", "fast")

    settings = Settings()

    assert settings.video_poll_interval == 10.0
    assert settings.audio_sample_rate == 24000
