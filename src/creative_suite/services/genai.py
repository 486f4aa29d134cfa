"""
Gemini Service (Native Async) using google-genai.

Uses:
- client.aio.models.generate_videos / client.aio.operations.get for Veo jobs
- client.aio.models.generate_content for image edits, scripts and speech
- httpx for downloading finished videos

A new genai.Client is built for every call so the latest selected key is used.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from creative_suite.codec import decode_base64, encode_base64
from creative_suite.config import Settings, get_settings
from creative_suite.errors import (
    AudioGenerationError,
    CredentialError,
    ErrorKind,
    NoContentError,
    ScriptGenerationError,
    UpstreamError,
)
from creative_suite.models import GeneratedVideo, GenerationRequest, VideoOperation
from creative_suite.pipeline import SequentialPipeline, Stage, StageListener
from creative_suite.services.credentials import CredentialProvider

logger = logging.getLogger(__name__)

VIDEO_CONFIG = {
    "number_of_videos": 1,
    "resolution": "720p",
    "aspect_ratio": "16:9",
}

SCRIPT_PROMPT_TEMPLATE = (
    "Based on the user's request and the provided image, generate a concise and engaging "
    "script for an audio introduction. The script should be ready for text-to-speech. "
    'User\'s request: "{prompt}"'
)

_CREDENTIAL_CODES = {401, 403, 404}
_CREDENTIAL_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED", "NOT_FOUND"}

ClientFactory = Callable[[str], genai.Client]


def script_prompt(prompt: str) -> str:
    return SCRIPT_PROMPT_TEMPLATE.format(prompt=prompt)


def _default_client_factory(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


def _classify_api_error(exc: genai_errors.APIError, action: str) -> UpstreamError:
    code = getattr(exc, "code", None)
    status = (getattr(exc, "status", None) or "").upper()
    message = getattr(exc, "message", None) or str(exc)

    if code in _CREDENTIAL_CODES or status in _CREDENTIAL_STATUSES:
        kind = ErrorKind.CREDENTIAL_REJECTED
    else:
        kind = ErrorKind.UPSTREAM_STATUS
    return UpstreamError(f"{action} failed: {message}", kind=kind, status_code=code)


@contextlib.asynccontextmanager
async def _upstream_call(action: str):
    try:
        yield
    except genai_errors.APIError as e:
        logger.error(f"[GenAI] {action} rejected: {e}")
        raise _classify_api_error(e, action) from e
    except (httpx.HTTPError, OSError, asyncio.TimeoutError) as e:
        logger.error(f"[GenAI] {action} transport error: {e}")
        raise UpstreamError(f"{action} failed: {e}", kind=ErrorKind.TRANSPORT) from e


def _operation_snapshot(operation) -> VideoOperation:
    """Copy the SDK operation into an immutable snapshot."""
    response = getattr(operation, "response", None) or getattr(operation, "result", None)
    videos: tuple[GeneratedVideo, ...] = ()
    if response is not None:
        videos = tuple(
            GeneratedVideo(uri=getattr(getattr(item, "video", None), "uri", None))
            for item in (getattr(response, "generated_videos", None) or [])
        )

    error = getattr(operation, "error", None)
    if isinstance(error, dict):
        error = error.get("message") or str(error)

    return VideoOperation(
        name=getattr(operation, "name", None) or "",
        done=bool(getattr(operation, "done", False)),
        generated_videos=videos,
        error=str(error) if error else None,
    )


def _first_inline_data(response) -> bytes | str | None:
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        if content is None:
            continue
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return inline.data
    return None


class GeminiCreativeClient:
    """Typed calls to Gemini/Veo for the three creative modes."""

    def __init__(
        self,
        credentials: CredentialProvider,
        settings: Settings | None = None,
        *,
        client_factory: ClientFactory | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._settings = settings or get_settings()
        self._client_factory = client_factory or _default_client_factory
        self._http_transport = http_transport

    def _api_key(self) -> str:
        api_key = self._credentials.get_api_key()
        if not api_key:
            raise CredentialError("No API key selected. Please select an API key.")
        return api_key

    def _client(self) -> genai.Client:
        return self._client_factory(self._api_key())

    # === Video ===

    async def request_video(self, prompt: str, image_bytes: bytes, mime_type: str) -> VideoOperation:
        """Submit one Veo job (single 720p 16:9 video)."""
        client = self._client()
        logger.info(f"[GenAI] Submitting video: {prompt[:50]}...")

        async with _upstream_call("Video submission"):
            operation = await client.aio.models.generate_videos(
                model=self._settings.video_model,
                prompt=prompt,
                image=genai_types.Image(image_bytes=image_bytes, mime_type=mime_type),
                config=genai_types.GenerateVideosConfig(**VIDEO_CONFIG),
            )

        snapshot = _operation_snapshot(operation)
        logger.info(f"[GenAI] Video operation started: {snapshot.name}")
        return snapshot

    async def poll_video(self, operation: VideoOperation) -> VideoOperation:
        """Fetch a fresh snapshot of ``operation``; the argument is left as is."""
        client = self._client()

        async with _upstream_call("Video status check"):
            refreshed = await client.aio.operations.get(
                genai_types.GenerateVideosOperation(name=operation.name)
            )

        return _operation_snapshot(refreshed)

    async def fetch_video(self, uri: str) -> bytes:
        """Download a finished video; the key goes in the ``key`` query parameter."""
        api_key = self._api_key()
        logger.info(f"[GenAI] Downloading video from {uri[:50]}...")

        async with _upstream_call("Video download"):
            async with httpx.AsyncClient(
                timeout=self._settings.upstream_timeout,
                transport=self._http_transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(httpx.URL(uri).copy_merge_params({"key": api_key}))

        if not response.is_success:
            kind = (
                ErrorKind.CREDENTIAL_REJECTED
                if response.status_code in (401, 403)
                else ErrorKind.UPSTREAM_STATUS
            )
            raise UpstreamError(
                f"Failed to fetch video: {response.reason_phrase}",
                kind=kind,
                status_code=response.status_code,
            )
        return response.content

    # === Image ===

    async def request_image_edit(self, prompt: str, image_bytes: bytes, mime_type: str) -> bytes:
        client = self._client()
        logger.info(f"[GenAI] Editing image: {prompt[:50]}...")

        async with _upstream_call("Image generation"):
            response = await client.aio.models.generate_content(
                model=self._settings.image_model,
                contents=[
                    genai_types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                    genai_types.Part.from_text(text=prompt),
                ],
                config=genai_types.GenerateContentConfig(response_modalities=["IMAGE"]),
            )

        data = _first_inline_data(response)
        if not data:
            raise NoContentError("No image data found in the response.")
        return decode_base64(data) if isinstance(data, str) else data

    # === Audio ===

    async def request_script(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        """Stage one: narration script conditioned on the image and prompt."""
        client = self._client()

        async with _upstream_call("Script generation"):
            response = await client.aio.models.generate_content(
                model=self._settings.script_model,
                contents=[
                    genai_types.Part.from_text(text=script_prompt(prompt)),
                    genai_types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                ],
            )

        script = (getattr(response, "text", None) or "").strip()
        if not script:
            raise ScriptGenerationError("Failed to generate a script from the image.")
        logger.info(f"[GenAI] Generated script: \"{script[:100]}...\"")
        return script

    async def request_narration(self, script: str) -> str:
        """Stage two: speech for ``script``. Returns base64 PCM."""
        client = self._client()
        voice = self._settings.tts_voice_name

        async with _upstream_call("Audio generation"):
            response = await client.aio.models.generate_content(
                model=self._settings.tts_model,
                contents=script,
                config=genai_types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=genai_types.SpeechConfig(
                        voice_config=genai_types.VoiceConfig(
                            prebuilt_voice_config=genai_types.PrebuiltVoiceConfig(voice_name=voice)
                        )
                    ),
                ),
            )

        data = _first_inline_data(response)
        if not data:
            raise AudioGenerationError("Failed to generate audio from the script.")
        return data if isinstance(data, str) else encode_base64(data)

    def narration_pipeline(self) -> SequentialPipeline:
        async def _script(request: GenerationRequest) -> str:
            return await self.request_script(request.prompt, request.image_bytes, request.mime_type)

        return SequentialPipeline(
            [
                Stage("script", _script, "Analyzing image and generating script..."),
                Stage("narration", self.request_narration, "Synthesizing narration..."),
            ]
        )

    async def request_audio_narration(
        self,
        prompt: str,
        image_bytes: bytes,
        mime_type: str,
        on_stage: StageListener | None = None,
    ) -> str:
        """Script first, then speech for that script. Returns base64 PCM."""
        request = GenerationRequest(prompt=prompt, image_bytes=image_bytes, mime_type=mime_type)
        return await self.narration_pipeline().run(request, on_stage=on_stage)
