"""
Workflow package.

- poller: long-running video operation polling
- controllers: per-mode state machines (video, image, audio)
"""

from creative_suite.workflow.controllers import (
    AudioWorkflowController,
    ImageWorkflowController,
    PlaybackContext,
    VideoWorkflowController,
    WorkflowController,
)
from creative_suite.workflow.poller import OperationPoller

__all__ = [
    "AudioWorkflowController",
    "ImageWorkflowController",
    "OperationPoller",
    "PlaybackContext",
    "VideoWorkflowController",
    "WorkflowController",
]
