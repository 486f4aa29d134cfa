"""
Mode switcher: one controller per creative mode, one of them active.

Controllers live for the whole process, so switching modes never cancels
or resets a run that is still in flight.
"""

from __future__ import annotations

import logging

from creative_suite.config import Settings, get_settings
from creative_suite.models import CreativeMode
from creative_suite.services.credentials import EnvCredentialProvider, SelectableCredentialProvider
from creative_suite.services.genai import ClientFactory, GeminiCreativeClient
from creative_suite.workflow.controllers import (
    AudioWorkflowController,
    ImageWorkflowController,
    VideoWorkflowController,
    WorkflowController,
)
from creative_suite.workflow.poller import OperationPoller

logger = logging.getLogger(__name__)


class CreativeSuite:
    def __init__(
        self,
        video: VideoWorkflowController,
        image: ImageWorkflowController,
        audio: AudioWorkflowController,
        active_mode: CreativeMode = CreativeMode.VIDEO,
    ) -> None:
        self._controllers: dict[CreativeMode, WorkflowController] = {
            CreativeMode.VIDEO: video,
            CreativeMode.IMAGE: image,
            CreativeMode.AUDIO: audio,
        }
        self.active_mode = active_mode

    @property
    def video(self) -> VideoWorkflowController:
        return self._controllers[CreativeMode.VIDEO]  # type: ignore[return-value]

    @property
    def image(self) -> ImageWorkflowController:
        return self._controllers[CreativeMode.IMAGE]  # type: ignore[return-value]

    @property
    def audio(self) -> AudioWorkflowController:
        return self._controllers[CreativeMode.AUDIO]  # type: ignore[return-value]

    @property
    def modes(self) -> list[CreativeMode]:
        return list(self._controllers)

    def controller(self, mode: CreativeMode | str) -> WorkflowController:
        return self._controllers[CreativeMode(mode)]

    @property
    def active(self) -> WorkflowController:
        return self._controllers[self.active_mode]

    def switch_mode(self, mode: CreativeMode | str) -> WorkflowController:
        """Make ``mode`` the visible mode. Audio playback stops when leaving audio."""
        mode = CreativeMode(mode)
        if mode is not self.active_mode:
            if self.active_mode is CreativeMode.AUDIO:
                self.audio.playback.stop()
            logger.info(f"[Suite] Switching mode {self.active_mode.value} -> {mode.value}")
            self.active_mode = mode
        return self.active


def build_suite(
    settings: Settings | None = None,
    *,
    client_factory: ClientFactory | None = None,
) -> CreativeSuite:
    """Wire clients, poller and controllers from settings."""
    settings = settings or get_settings()
    env_credentials = EnvCredentialProvider(settings)
    video_credentials = SelectableCredentialProvider(fallback=env_credentials)

    video_client = GeminiCreativeClient(video_credentials, settings, client_factory=client_factory)
    media_client = GeminiCreativeClient(env_credentials, settings, client_factory=client_factory)

    poller = OperationPoller(
        video_client,
        interval=settings.video_poll_interval,
        max_attempts=settings.poll_max_attempts,
    )
    return CreativeSuite(
        video=VideoWorkflowController(video_client, video_credentials, poller),
        image=ImageWorkflowController(media_client),
        audio=AudioWorkflowController(
            media_client,
            sample_rate=settings.audio_sample_rate,
            channel_count=settings.audio_channels,
        ),
    )
