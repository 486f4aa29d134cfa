"""Tests for credential providers and the mode switcher."""

import pytest

from creative_suite.codec import decode_pcm_to_audio_buffer
from creative_suite.models import CreativeMode
from creative_suite.services.credentials import (
    CredentialProvider,
    EnvCredentialProvider,
    SelectableCredentialProvider,
)
from creative_suite.suite import build_suite
from creative_suite.workflow.controllers import (
    AudioWorkflowController,
    ImageWorkflowController,
    VideoWorkflowController,
)


def test_env_provider(settings):
    provider = EnvCredentialProvider(settings)

    assert isinstance(provider, CredentialProvider)
    assert provider.has_selected_key()
    assert provider.get_api_key() == "test-gemini-key"


def test_selectable_provider_falls_back_until_cleared(settings):
    provider = SelectableCredentialProvider(fallback=EnvCredentialProvider(settings))
    assert provider.get_api_key() == "test-gemini-key"

    provider.clear()
    assert not provider.has_selected_key()

    provider.select_key(" chosen ")
    assert provider.get_api_key() == "chosen"


def test_selectable_provider_rejects_empty_key():
    with pytest.raises(ValueError):
        SelectableCredentialProvider().select_key("")


def test_build_suite_wires_one_controller_per_mode(settings):
    suite = build_suite(settings)

    assert suite.active_mode is CreativeMode.VIDEO
    assert isinstance(suite.controller("video"), VideoWorkflowController)
    assert isinstance(suite.controller(CreativeMode.IMAGE), ImageWorkflowController)
    assert isinstance(suite.controller("audio"), AudioWorkflowController)
    assert suite.audio.playback.sample_rate == settings.audio_sample_rate


def test_switch_mode_keeps_controllers(settings):
    suite = build_suite(settings)
    image = suite.image

    suite.switch_mode("image")
    suite.switch_mode(CreativeMode.AUDIO)
    suite.switch_mode("image")

    assert suite.active is image
    assert suite.controller("image") is image


def test_leaving_audio_stops_playback(settings):
    suite = build_suite(settings)
    suite.switch_mode("audio")
    suite.audio.playback.play(decode_pcm_to_audio_buffer(b"\x00\x00" * 10))

    suite.switch_mode("video")

    assert not suite.audio.is_playing


def test_unknown_mode(settings):
    with pytest.raises(ValueError):
        build_suite(settings).switch_mode("podcast")
