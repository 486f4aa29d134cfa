"""Async relay to the SiliconFlow REST API (https://docs.siliconflow.cn/)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from creative_suite.config import Settings, get_settings
from creative_suite.errors import ProxyConfigError

logger = logging.getLogger(__name__)

TRANSCRIPTIONS_PATH = "/v1/audio/transcriptions"
IMAGE_GENERATIONS_PATH = "/v1/images/generations"
DEFAULT_TRANSCRIPTION_MODEL = "FunAudioLLM/SenseVoiceSmall"


@dataclass(frozen=True)
class UpstreamReply:
    """Upstream answer relayed back to the caller untouched."""

    status_code: int
    content_type: str
    body: bytes


class SiliconFlowForwarder:
    """Attach the server-held key and forward one request upstream."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    @property
    def settings(self) -> Settings:
        return self._settings

    def ensure_configured(self) -> None:
        if not self._settings.siliconflow_api_key:
            raise ProxyConfigError("SILICONFLOW_API_KEY not configured")

    def _auth_headers(self) -> dict[str, str]:
        self.ensure_configured()
        return {"Authorization": f"Bearer {self._settings.siliconflow_api_key}"}

    def _url(self, path: str) -> str:
        return f"{self._settings.siliconflow_root}{path}"

    async def _send(self, path: str, **kwargs: Any) -> UpstreamReply:
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        async with httpx.AsyncClient(
            timeout=self._settings.upstream_timeout, transport=self._transport
        ) as client:
            response = await client.post(self._url(path), headers=headers, **kwargs)

        logger.info(f"[SiliconFlow] POST {path} -> {response.status_code}")
        return UpstreamReply(
            status_code=response.status_code,
            content_type=response.headers.get("content-type") or "application/json",
            body=response.content,
        )

    async def forward_transcription(
        self, file_name: str, data: bytes, model: str = DEFAULT_TRANSCRIPTION_MODEL
    ) -> UpstreamReply:
        """Re-encode the audio as multipart/form-data (``model`` + ``file``)."""
        logger.info(f"[SiliconFlow] Transcription: file={file_name} size={len(data)} model={model}")
        return await self._send(
            TRANSCRIPTIONS_PATH,
            data={"model": model},
            files={"file": (file_name, data)},
        )

    async def forward_image_generation(self, body: dict[str, Any]) -> UpstreamReply:
        logger.info(f"[SiliconFlow] Image generation: model={body.get('model')}")
        return await self._send(
            IMAGE_GENERATIONS_PATH,
            json=body,
            headers={"Content-Type": "application/json"},
        )
