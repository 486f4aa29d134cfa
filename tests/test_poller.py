"""Tests for the video operation poller."""

import pytest

from creative_suite.errors import MissingResultError, PollTimeoutError, SupersededError
from creative_suite.workflow.poller import OperationPoller
from fakes import ScriptedCreativeClient, video_operation


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.mark.asyncio
async def test_polls_until_done_with_fixed_interval():
    source = ScriptedCreativeClient()
    source.poll_results = [
        video_operation(done=False),
        video_operation(done=True, uri="https://example.test/v.mp4"),
    ]
    sleep = RecordingSleep()
    poller = OperationPoller(source, interval=10.0, sleep=sleep)

    result = await poller.wait_until_done(video_operation(done=False))

    assert result.done
    assert source.count("poll_video") == 2
    assert sleep.delays == [10.0, 10.0]
    assert poller.result_uri(result) == "https://example.test/v.mp4"


@pytest.mark.asyncio
async def test_already_done_operation_is_not_polled():
    source = ScriptedCreativeClient()
    sleep = RecordingSleep()
    poller = OperationPoller(source, sleep=sleep)

    result = await poller.wait_until_done(video_operation(done=True, uri="u"))

    assert result.done
    assert source.calls == []
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_on_poll_receives_each_snapshot():
    source = ScriptedCreativeClient()
    source.poll_results = [video_operation(done=False), video_operation(done=True, uri="u")]
    seen = []
    poller = OperationPoller(source, sleep=RecordingSleep())

    await poller.wait_until_done(
        video_operation(), on_poll=lambda op, attempt: seen.append((op.done, attempt))
    )

    assert seen == [(False, 1), (True, 2)]


@pytest.mark.asyncio
async def test_superseded_run_stops_polling():
    source = ScriptedCreativeClient()
    poller = OperationPoller(source, sleep=RecordingSleep())

    with pytest.raises(SupersededError):
        await poller.wait_until_done(video_operation(), is_current=lambda: False)

    assert source.calls == []


@pytest.mark.asyncio
async def test_max_attempts_bounds_polling():
    source = ScriptedCreativeClient()
    source.poll_results = [video_operation(done=False) for _ in range(3)]
    poller = OperationPoller(source, max_attempts=2, sleep=RecordingSleep())

    with pytest.raises(PollTimeoutError):
        await poller.wait_until_done(video_operation())

    assert source.count("poll_video") == 2


def test_result_uri_missing():
    with pytest.raises(MissingResultError) as exc_info:
        OperationPoller.result_uri(video_operation(done=True))
    assert exc_info.value.message == "Video generation completed but no video URI was found."
