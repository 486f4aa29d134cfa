"""
Long-running operation poller for video jobs.

Submitted -> Polling -> Done | Failed. The loop waits a fixed interval before
each status check and has no ceiling unless ``max_attempts`` is set.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from creative_suite.errors import MissingResultError, PollTimeoutError, SupersededError
from creative_suite.models import VideoOperation

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0


class VideoStatusSource(Protocol):
    async def poll_video(self, operation: VideoOperation) -> VideoOperation: ...


class OperationPoller:
    """Poll a video operation until the remote reports ``done``."""

    def __init__(
        self,
        source: VideoStatusSource,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self._interval = interval
        self._max_attempts = max_attempts
        self._sleep = sleep

    async def wait_until_done(
        self,
        operation: VideoOperation,
        *,
        is_current: Callable[[], bool] | None = None,
        on_poll: Callable[[VideoOperation, int], None] | None = None,
    ) -> VideoOperation:
        """
        Poll until ``operation.done``.

        Args:
            operation: snapshot returned by the submit call
            is_current: returns False once a newer submission replaced this run
            on_poll: called with each new snapshot and the attempt number

        Returns:
            The terminal snapshot

        Raises:
            SupersededError: the run was replaced while waiting
            PollTimeoutError: ``max_attempts`` status checks did not finish the job
        """
        attempts = 0
        while not operation.done:
            if self._max_attempts is not None and attempts >= self._max_attempts:
                raise PollTimeoutError(
                    f"Video generation did not finish after {attempts} status checks."
                )

            await self._sleep(self._interval)
            if is_current is not None and not is_current():
                logger.info(f"[Poller] Abandoning superseded operation {operation.name}")
                raise SupersededError("A newer submission replaced this video job.")

            operation = await self._source.poll_video(operation)
            attempts += 1
            logger.info(f"[Poller] {operation.name}: attempt={attempts} done={operation.done}")
            if on_poll is not None:
                on_poll(operation, attempts)

        return operation

    @staticmethod
    def result_uri(operation: VideoOperation) -> str:
        """URI of the first generated video of a finished operation."""
        uri = operation.first_video_uri
        if uri:
            return uri

        message = "Video generation completed but no video URI was found."
        if operation.error:
            message = f"{message} ({operation.error})"
        raise MissingResultError(message)
