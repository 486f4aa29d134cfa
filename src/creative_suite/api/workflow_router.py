"""
Workflow API router.

Endpoints:
- GET  /api/modes - Active mode and available modes
- POST /api/modes/{mode} - Switch the active mode
- GET  /api/workflows/{mode} - Controller snapshot
- POST /api/workflows/{mode}/image - Upload the source image
- DELETE /api/workflows/{mode}/image - Clear the source image
- POST /api/workflows/{mode}/submit - Start a generation (non-blocking)
- GET  /api/workflows/{mode}/result - Generated asset bytes
- GET/POST /api/workflows/video/credential - Credential status / selection
- POST /api/workflows/audio/playback - Toggle audio playback
- POST /api/workflows/audio/playback/ended - Playback finished on the page
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field

from creative_suite.codec import SelectedFile
from creative_suite.errors import UnsupportedTypeError
from creative_suite.models import CreativeMode
from creative_suite.suite import CreativeSuite

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["workflows"])


def get_suite(request: Request) -> CreativeSuite:
    return request.app.state.suite


# === Models ===

class ModesResponse(BaseModel):
    """Active mode and the ordered list of modes."""
    active_mode: CreativeMode
    modes: list[CreativeMode]


class SubmitRequest(BaseModel):
    """Prompt for a new generation. Omit to reuse the current prompt."""
    prompt: str | None = Field(default=None, description="Generation prompt")


class CredentialRequest(BaseModel):
    api_key: str = Field(..., description="API key selected for video generation")


class CredentialResponse(BaseModel):
    selected: bool


class PlaybackResponse(BaseModel):
    is_playing: bool


def _modes(suite: CreativeSuite) -> ModesResponse:
    return ModesResponse(active_mode=suite.active_mode, modes=suite.modes)


# === Navigation ===

@router.get("/modes", response_model=ModesResponse)
async def list_modes(suite: CreativeSuite = Depends(get_suite)):
    return _modes(suite)


@router.post("/modes/{mode}", response_model=ModesResponse)
async def switch_mode(mode: CreativeMode, suite: CreativeSuite = Depends(get_suite)):
    suite.switch_mode(mode)
    return _modes(suite)


# === Video credential ===

@router.get("/workflows/video/credential", response_model=CredentialResponse)
async def credential_status(suite: CreativeSuite = Depends(get_suite)):
    return CredentialResponse(selected=suite.video.credential_selected)


@router.post("/workflows/video/credential", response_model=CredentialResponse)
async def select_credential(body: CredentialRequest, suite: CreativeSuite = Depends(get_suite)):
    try:
        suite.video.select_credential(body.api_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return CredentialResponse(selected=suite.video.credential_selected)


# === Audio playback ===

@router.post("/workflows/audio/playback", response_model=PlaybackResponse)
async def toggle_playback(suite: CreativeSuite = Depends(get_suite)):
    if suite.audio.asset is None:
        raise HTTPException(status_code=404, detail="No audio has been generated yet.")
    return PlaybackResponse(is_playing=suite.audio.toggle_playback())


@router.post("/workflows/audio/playback/ended", response_model=PlaybackResponse)
async def playback_ended(suite: CreativeSuite = Depends(get_suite)):
    return PlaybackResponse(is_playing=suite.audio.playback_ended())


# === Workflows ===

@router.get("/workflows/{mode}")
async def get_workflow(mode: CreativeMode, suite: CreativeSuite = Depends(get_suite)) -> dict[str, Any]:
    return suite.controller(mode).snapshot()


@router.post("/workflows/{mode}/image")
async def upload_image(
    mode: CreativeMode,
    file: UploadFile = File(...),
    suite: CreativeSuite = Depends(get_suite),
) -> dict[str, Any]:
    controller = suite.controller(mode)
    data = await file.read()
    selected = SelectedFile(
        filename=file.filename or "upload",
        mime_type=file.content_type or "application/octet-stream",
        data=data,
    )
    try:
        controller.select_image(selected)
    except UnsupportedTypeError as e:
        raise HTTPException(status_code=415, detail=e.message) from e
    return controller.snapshot()


@router.delete("/workflows/{mode}/image")
async def clear_image(mode: CreativeMode, suite: CreativeSuite = Depends(get_suite)) -> dict[str, Any]:
    controller = suite.controller(mode)
    controller.select_image(None)
    return controller.snapshot()


@router.post("/workflows/{mode}/submit", status_code=202)
async def submit(
    mode: CreativeMode,
    body: SubmitRequest,
    suite: CreativeSuite = Depends(get_suite),
) -> dict[str, Any]:
    """Schedule a generation and return immediately; poll the snapshot for progress."""
    controller = suite.controller(mode)
    try:
        controller.submit(body.prompt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return controller.snapshot()


@router.get("/workflows/{mode}/result")
async def get_result(mode: CreativeMode, suite: CreativeSuite = Depends(get_suite)):
    asset = suite.controller(mode).asset
    if asset is None:
        raise HTTPException(status_code=404, detail="No result available")
    return Response(content=asset.data, media_type=asset.mime_type)
