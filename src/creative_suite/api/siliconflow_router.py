"""
SiliconFlow proxy router.

Endpoints:
- POST /siliconflow/audio - JSON {fileName, fileBase64, model?} -> multipart transcription upstream
- POST /siliconflow/images - JSON body forwarded verbatim to image generation upstream

The server-held SILICONFLOW_API_KEY is attached here so browsers never see it.
Upstream status, content type and body are relayed untouched.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from creative_suite.codec import decode_base64
from creative_suite.config import get_settings
from creative_suite.errors import MalformedInputError, MissingFieldError, ProxyConfigError
from creative_suite.services.siliconflow import (
    DEFAULT_TRANSCRIPTION_MODEL,
    SiliconFlowForwarder,
    UpstreamReply,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/siliconflow", tags=["siliconflow"])

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_forwarder() -> SiliconFlowForwarder:
    return SiliconFlowForwarder(get_settings())


# === Helpers ===

class ProxyRejection(Exception):
    """Early exit with a JSON error body."""

    def __init__(self, status_code: int, error: str) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error


def _error(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if detail is not None:
        content["detail"] = detail
    return JSONResponse(status_code=status_code, content=content)


def _relay(reply: UpstreamReply) -> Response:
    return Response(
        content=reply.body,
        status_code=reply.status_code,
        headers={"Content-Type": reply.content_type},
    )


async def _read_json_object(request: Request, max_bytes: int) -> dict[str, Any]:
    if request.method != "POST":
        raise ProxyRejection(405, "Method not allowed")

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise ProxyRejection(413, "Payload too large")

    raw = await request.body()
    if len(raw) > max_bytes:
        raise ProxyRejection(413, "Payload too large")
    if not raw.strip():
        return {}

    try:
        body = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProxyRejection(400, "Request body must be a JSON object") from e
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ProxyRejection(400, "Request body must be a JSON object")
    return body


# === Endpoints ===

@router.api_route("/audio", methods=ALL_METHODS)
async def proxy_audio(request: Request, forwarder: SiliconFlowForwarder = Depends(get_forwarder)):
    """Forward a base64 audio file for transcription."""
    try:
        body = await _read_json_object(request, forwarder.settings.proxy_max_payload_bytes)

        file_name = body.get("fileName")
        file_base64 = body.get("fileBase64")
        model = body.get("model") or DEFAULT_TRANSCRIPTION_MODEL
        if not (isinstance(file_name, str) and file_name and isinstance(file_base64, str) and file_base64):
            raise MissingFieldError("fileName and fileBase64 are required")

        forwarder.ensure_configured()
        data = decode_base64(file_base64)
        reply = await forwarder.forward_transcription(file_name, data, model=str(model))
    except ProxyRejection as e:
        return _error(e.status_code, e.error)
    except (MissingFieldError, MalformedInputError) as e:
        return _error(400, e.message)
    except ProxyConfigError as e:
        return _error(500, e.message)
    except Exception as e:
        logger.error(f"[SiliconFlow] audio proxy error: {e}", exc_info=True)
        return _error(500, "proxy error", str(e))

    return _relay(reply)


@router.api_route("/images", methods=ALL_METHODS)
async def proxy_images(request: Request, forwarder: SiliconFlowForwarder = Depends(get_forwarder)):
    """Forward an image generation request body verbatim."""
    try:
        body = await _read_json_object(request, forwarder.settings.proxy_max_payload_bytes)
        forwarder.ensure_configured()
        reply = await forwarder.forward_image_generation(body)
    except ProxyRejection as e:
        return _error(e.status_code, e.error)
    except ProxyConfigError as e:
        return _error(500, e.message)
    except Exception as e:
        logger.error(f"[SiliconFlow] images proxy error: {e}", exc_info=True)
        return _error(500, "proxy error", str(e))

    return _relay(reply)
