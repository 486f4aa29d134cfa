"""
Per-mode workflow controllers.

Each controller owns the state machine of one mode (idle -> loading ->
ready/failed), the selected image, and the latest generated asset. Runs are
scheduled on the event loop so the HTTP layer never blocks on generation.

Every submission bumps a generation counter. A run may only touch controller
state while its generation is current; anything that arrives for an older
generation is dropped.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from creative_suite.codec import (
    AudioBuffer,
    SelectedFile,
    decode_base64,
    decode_pcm_to_audio_buffer,
    encode_file_to_base64,
    to_data_url,
)
from creative_suite.errors import CreativeSuiteError, ErrorKind, SupersededError
from creative_suite.models import (
    AssetKind,
    CreativeMode,
    GeneratedAsset,
    GenerationRequest,
    WorkflowState,
)
from creative_suite.pipeline import Stage
from creative_suite.services.credentials import SelectableCredentialProvider
from creative_suite.services.genai import GeminiCreativeClient
from creative_suite.workflow.poller import OperationPoller

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please provide a prompt and an image."


class WorkflowController:
    """Shared intake, submission and state handling for one mode."""

    mode: CreativeMode
    default_prompt: str = ""
    unknown_error_message: str = "An unknown error occurred."

    def __init__(self, client: GeminiCreativeClient) -> None:
        self._client = client
        self.prompt: str = self.default_prompt
        self.image: SelectedFile | None = None
        self.image_preview: str | None = None
        self.state: WorkflowState = WorkflowState.IDLE
        self.error: str | None = None
        self.error_kind: ErrorKind | None = None
        self.asset: GeneratedAsset | None = None
        self.loading_step: str = ""
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._started_at: float | None = None
        self.clock: Callable[[], float] = time.monotonic

    # === Intake ===

    def select_image(self, file: SelectedFile | None) -> None:
        """
        Replace the selected image. A non-image raises ``UnsupportedTypeError``
        before anything is changed.
        """
        if file is None:
            self.image = None
            self.image_preview = None
            return

        encoded, mime_type = encode_file_to_base64(file, require_image=True)
        self.image = file
        self.image_preview = to_data_url(encoded, mime_type)
        logger.info(f"[{self.mode.value}] Image selected: {file.filename} ({mime_type}, {len(file.data)} bytes)")

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    # === Generation bookkeeping ===

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _advance(self, generation: int, state: WorkflowState, step: str | None = None) -> None:
        if not self.is_current(generation):
            raise SupersededError(f"{self.mode.value} run {generation} was superseded")
        self.state = state
        if step is not None:
            self.loading_step = step

    def _build_request(self) -> GenerationRequest:
        prompt = (self.prompt or "").strip()
        if not prompt or self.image is None:
            raise ValueError(MISSING_INPUT_MESSAGE)
        return GenerationRequest(
            prompt=prompt,
            image_bytes=self.image.data,
            mime_type=self.image.mime_type,
        )

    def submit(self, prompt: str | None = None) -> asyncio.Task | None:
        """
        Start a new generation and return its task, or ``None`` when the mode
        is waiting for something else (e.g. a credential).

        Raises:
            ValueError: prompt or image missing
        """
        if prompt is not None:
            self.prompt = prompt
        request = self._build_request()

        self._generation += 1
        generation = self._generation
        self.asset = None
        self.error = None
        self.error_kind = None
        self.loading_step = ""
        self._before_submit()

        if not self._ready_to_submit():
            return None

        self.state = WorkflowState.SUBMITTING
        self._started_at = self.clock()
        logger.info(f"[{self.mode.value}] Submitting generation {generation}")
        self._task = asyncio.create_task(
            self._run(generation, request), name=f"{self.mode.value}-generation-{generation}"
        )
        return self._task

    async def _run(self, generation: int, request: GenerationRequest) -> None:
        try:
            asset = await self._generate(generation, request)
        except SupersededError:
            logger.info(f"[{self.mode.value}] Generation {generation} superseded; result dropped")
            return
        except CreativeSuiteError as e:
            logger.error(f"[{self.mode.value}] Generation {generation} failed: {e.message}")
            self._fail(generation, e)
            return
        except Exception as e:
            logger.error(f"[{self.mode.value}] Generation {generation} crashed: {e}", exc_info=True)
            self._fail(generation, e)
            return

        if not self.is_current(generation):
            logger.info(f"[{self.mode.value}] Late result for generation {generation} dropped")
            return

        self.asset = asset
        self.state = WorkflowState.READY
        self.loading_step = ""
        logger.info(f"[{self.mode.value}] Generation {generation} ready ({len(asset.data)} bytes)")

    def _fail(self, generation: int, exc: Exception) -> None:
        if not self.is_current(generation):
            logger.info(f"[{self.mode.value}] Late failure for generation {generation} dropped")
            return
        self.error_kind = exc.kind if isinstance(exc, CreativeSuiteError) else None
        self.error = self._error_message(exc)
        self.state = WorkflowState.FAILED
        self.loading_step = ""

    def _error_message(self, exc: Exception) -> str:
        if isinstance(exc, CreativeSuiteError):
            return exc.message or self.unknown_error_message
        return str(exc) or self.unknown_error_message

    # === Mode hooks ===

    def _before_submit(self) -> None:
        pass

    def _ready_to_submit(self) -> bool:
        return True

    async def _generate(self, generation: int, request: GenerationRequest) -> GeneratedAsset:
        raise NotImplementedError

    def _extra_snapshot(self) -> dict[str, Any]:
        return {}

    # === Rendering ===

    def snapshot(self) -> dict[str, Any]:
        result = None
        if self.asset is not None:
            result = {
                "kind": self.asset.kind.value,
                "mime_type": self.asset.mime_type,
                "size": len(self.asset.data),
            }
        return {
            "mode": self.mode.value,
            "state": self.state.value,
            "is_loading": self.is_loading,
            "generation": self._generation,
            "prompt": self.prompt,
            "has_image": self.image is not None,
            "image_preview": self.image_preview,
            "loading_step": self.loading_step,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "result": result,
            **self._extra_snapshot(),
        }


# ========================================
# Video
# ========================================

VIDEO_LOADING_MESSAGES = [
    "Warming up the digital director's chair...",
    "Choreographing pixels into motion...",
    "Rendering your vision, frame by frame...",
    "This can take a few minutes, good things come to those who wait!",
    "Almost there, adding the final cinematic touches...",
]
LOADING_MESSAGE_PERIOD = 3.0


class VideoWorkflowController(WorkflowController):
    mode = CreativeMode.VIDEO
    default_prompt = "A neon hologram of this subject driving at top speed"

    def __init__(
        self,
        client: GeminiCreativeClient,
        credentials: SelectableCredentialProvider,
        poller: OperationPoller,
    ) -> None:
        super().__init__(client)
        self._credentials = credentials
        self._poller = poller

    @property
    def credential_selected(self) -> bool:
        return self._credentials.has_selected_key()

    def select_credential(self, api_key: str) -> None:
        self._credentials.select_key(api_key)
        if self.state is WorkflowState.AWAITING_CREDENTIAL:
            self.state = WorkflowState.IDLE
            self.error = None
            self.error_kind = None

    def _ready_to_submit(self) -> bool:
        if self.credential_selected:
            return True
        self.state = WorkflowState.AWAITING_CREDENTIAL
        self.error = "Please select an API key to generate videos."
        self.error_kind = ErrorKind.CREDENTIAL_MISSING
        return False

    @property
    def loading_message(self) -> str | None:
        if not self.is_loading or self._started_at is None:
            return None
        index = int((self.clock() - self._started_at) // LOADING_MESSAGE_PERIOD)
        return VIDEO_LOADING_MESSAGES[index % len(VIDEO_LOADING_MESSAGES)]

    async def _generate(self, generation: int, request: GenerationRequest) -> GeneratedAsset:
        operation = await self._client.request_video(request.prompt, request.image_bytes, request.mime_type)
        self._advance(generation, WorkflowState.POLLING)

        operation = await self._poller.wait_until_done(
            operation, is_current=lambda: self.is_current(generation)
        )
        uri = self._poller.result_uri(operation)

        self._advance(generation, WorkflowState.DECODING, "Downloading video...")
        data = await self._client.fetch_video(uri)
        return GeneratedAsset(kind=AssetKind.VIDEO, mime_type="video/mp4", data=data)

    def _fail(self, generation: int, exc: Exception) -> None:
        super()._fail(generation, exc)
        if self.is_current(generation) and self.error_kind is ErrorKind.CREDENTIAL_REJECTED:
            self.error = "API Key not found or invalid. Please re-select your key."
            self._credentials.clear()

    def _extra_snapshot(self) -> dict[str, Any]:
        return {
            "credential_selected": self.credential_selected,
            "loading_message": self.loading_message,
        }


# ========================================
# Image
# ========================================

class ImageWorkflowController(WorkflowController):
    mode = CreativeMode.IMAGE
    default_prompt = (
        "Create a professional product shot of this item on a clean, white background with soft lighting."
    )
    unknown_error_message = "An unknown error occurred while generating the image."

    async def _generate(self, generation: int, request: GenerationRequest) -> GeneratedAsset:
        data = await self._client.request_image_edit(request.prompt, request.image_bytes, request.mime_type)
        return GeneratedAsset(kind=AssetKind.IMAGE, mime_type="image/png", data=data)


# ========================================
# Audio
# ========================================

@dataclass
class PlaybackSource:
    """One started playback of a buffer."""

    source_id: int
    buffer: AudioBuffer = field(repr=False)
    connected: bool = True

    def disconnect(self) -> None:
        self.connected = False


class PlaybackContext:
    """Single playback output owned by the audio workflow."""

    def __init__(self, sample_rate: int) -> None:
        self.sample_rate = sample_rate
        self._source: PlaybackSource | None = None
        self._next_id = 0

    @property
    def current(self) -> PlaybackSource | None:
        return self._source

    @property
    def is_playing(self) -> bool:
        return self._source is not None and self._source.connected

    def play(self, buffer: AudioBuffer) -> PlaybackSource:
        self.stop()
        self._next_id += 1
        self._source = PlaybackSource(source_id=self._next_id, buffer=buffer)
        return self._source

    def stop(self) -> None:
        if self._source is not None:
            self._source.disconnect()
            self._source = None


class AudioWorkflowController(WorkflowController):
    mode = CreativeMode.AUDIO
    default_prompt = "Generate a short, enthusiastic audio introduction for this product."
    unknown_error_message = "An unknown error occurred while generating audio."

    def __init__(
        self,
        client: GeminiCreativeClient,
        *,
        sample_rate: int = 24000,
        channel_count: int = 1,
    ) -> None:
        super().__init__(client)
        self._channel_count = channel_count
        self.playback = PlaybackContext(sample_rate)

    @property
    def is_playing(self) -> bool:
        return self.playback.is_playing

    def _before_submit(self) -> None:
        self.playback.stop()

    async def _generate(self, generation: int, request: GenerationRequest) -> GeneratedAsset:
        def _on_stage(stage: Stage) -> None:
            self._advance(generation, WorkflowState.SUBMITTING, stage.description)

        audio_base64 = await self._client.request_audio_narration(
            request.prompt, request.image_bytes, request.mime_type, on_stage=_on_stage
        )

        self._advance(generation, WorkflowState.DECODING, "Decoding audio data...")
        pcm = decode_base64(audio_base64)
        buffer = decode_pcm_to_audio_buffer(pcm, self.playback.sample_rate, self._channel_count)
        return GeneratedAsset(
            kind=AssetKind.AUDIO,
            mime_type="audio/wav",
            data=buffer.to_wav_bytes(),
            audio=buffer,
        )

    def toggle_playback(self) -> bool:
        """Stop if playing, otherwise start the current buffer. Returns the new playing flag."""
        if self.playback.is_playing:
            self.playback.stop()
        elif self.asset is not None and self.asset.audio is not None:
            self.playback.play(self.asset.audio)
        return self.playback.is_playing

    def playback_ended(self) -> bool:
        """The page finished playing; never restarts playback."""
        self.playback.stop()
        return self.playback.is_playing

    def _extra_snapshot(self) -> dict[str, Any]:
        duration = None
        if self.asset is not None and self.asset.audio is not None:
            duration = round(self.asset.audio.duration, 3)
        return {"is_playing": self.is_playing, "duration": duration}
