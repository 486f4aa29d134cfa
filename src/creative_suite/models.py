"""Data model shared by the inference client and the workflow controllers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from creative_suite.codec import AudioBuffer


# ========================================
# Modes and workflow states
# ========================================

class CreativeMode(str, Enum):
    VIDEO = "video"
    IMAGE = "image"
    AUDIO = "audio"


class WorkflowState(str, Enum):
    IDLE = "idle"
    AWAITING_CREDENTIAL = "awaiting_credential"
    SUBMITTING = "submitting"
    POLLING = "polling"
    DECODING = "decoding"
    READY = "ready"
    FAILED = "failed"

    @property
    def is_loading(self) -> bool:
        return self in (WorkflowState.SUBMITTING, WorkflowState.POLLING, WorkflowState.DECODING)


# ========================================
# Requests and remote operations
# ========================================

@dataclass(frozen=True)
class GenerationRequest:
    """One submit action: prompt plus the source image."""

    prompt: str
    image_bytes: bytes
    mime_type: str


@dataclass(frozen=True)
class GeneratedVideo:
    uri: str | None


@dataclass(frozen=True)
class VideoOperation:
    """Snapshot of a long-running video job. Polling returns a new snapshot."""

    name: str
    done: bool = False
    generated_videos: tuple[GeneratedVideo, ...] = ()
    error: str | None = None

    @property
    def first_video_uri(self) -> str | None:
        if not self.generated_videos:
            return None
        return self.generated_videos[0].uri or None


# ========================================
# Results
# ========================================

class AssetKind(str, Enum):
    VIDEO = "video"
    IMAGE = "image"
    AUDIO = "audio"


@dataclass
class GeneratedAsset:
    """Result owned by one controller; replaced whole on the next submission."""

    kind: AssetKind
    mime_type: str
    data: bytes
    audio: AudioBuffer | None = field(default=None, repr=False)
