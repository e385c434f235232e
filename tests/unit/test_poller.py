import asyncio

import httpx
import pytest

from lambdaroute.core.exceptions import PollCancelledError, TaskTimeoutError, TransientStatusError
from lambdaroute.core.task_runner.poller import TaskPoller
from lambdaroute.interfaces.types.task import TaskHandle, TaskStatus

from fakes import TASK_URL, RecordingSleep, ScriptedStatusFetcher, failed, running, succeeded

HANDLE = TaskHandle(url=TASK_URL)


@pytest.mark.asyncio
async def test_returns_outcome_once_terminal(recording_sleep: RecordingSleep):
    fetcher = ScriptedStatusFetcher([running(), running(), succeeded('{"ok": true}')])
    poller = TaskPoller(fetcher, poll_interval=10, sleep=recording_sleep)

    outcome = await poller.poll(HANDLE, timeout_budget=60)

    assert outcome.status is TaskStatus.SUCCEEDED
    assert outcome.result_payload == '{"ok": true}'
    assert len(fetcher.calls) == 3
    assert recording_sleep.calls == [10, 10]


@pytest.mark.asyncio
async def test_times_out_after_budget_is_spent(recording_sleep: RecordingSleep):
    fetcher = ScriptedStatusFetcher([running()])
    poller = TaskPoller(fetcher, poll_interval=10, sleep=recording_sleep)

    with pytest.raises(TaskTimeoutError) as excinfo:
        await poller.poll(HANDLE, timeout_budget=30)

    assert len(fetcher.calls) == 3
    assert excinfo.value.attempts == 3
    assert excinfo.value.message == "Lambda Invocation did not finish on time"


@pytest.mark.asyncio
@pytest.mark.parametrize("script", [
    [TransientStatusError("502")],
    [running(), TransientStatusError("502"), running()],
    [httpx.ConnectError("refused"), TransientStatusError("bad json")],
])
async def test_transient_errors_neither_shorten_nor_extend_budget(recording_sleep: RecordingSleep, script):
    fetcher = ScriptedStatusFetcher(script)
    poller = TaskPoller(fetcher, poll_interval=10, sleep=recording_sleep)

    with pytest.raises(TaskTimeoutError):
        await poller.poll(HANDLE, timeout_budget=30)

    assert len(fetcher.calls) == 3
    assert sum(recording_sleep.calls) == 30


@pytest.mark.asyncio
async def test_transient_error_followed_by_success(recording_sleep: RecordingSleep):
    fetcher = ScriptedStatusFetcher([TransientStatusError("502"), succeeded("done")])
    poller = TaskPoller(fetcher, poll_interval=10, sleep=recording_sleep)

    outcome = await poller.poll(HANDLE, timeout_budget=30)

    assert outcome.status is TaskStatus.SUCCEEDED
    assert recording_sleep.calls == [10]


@pytest.mark.asyncio
async def test_budget_that_is_not_a_multiple_of_the_interval(recording_sleep: RecordingSleep):
    fetcher = ScriptedStatusFetcher([running()])
    poller = TaskPoller(fetcher, poll_interval=10, sleep=recording_sleep)

    with pytest.raises(TaskTimeoutError):
        await poller.poll(HANDLE, timeout_budget=25)
    assert len(fetcher.calls) == 3


@pytest.mark.asyncio
async def test_failed_status_is_returned_as_data(recording_sleep: RecordingSleep):
    fetcher = ScriptedStatusFetcher([running(), failed("Unhandled: KeyError")])
    poller = TaskPoller(fetcher, poll_interval=10, sleep=recording_sleep)

    outcome = await poller.poll(HANDLE, timeout_budget=30)

    assert outcome.status is TaskStatus.FAILED
    assert outcome.error_message == "Unhandled: KeyError"


@pytest.mark.asyncio
async def test_non_transient_errors_propagate(recording_sleep: RecordingSleep):
    fetcher = ScriptedStatusFetcher([RuntimeError("decoder bug")])
    poller = TaskPoller(fetcher, poll_interval=10, sleep=recording_sleep)

    with pytest.raises(RuntimeError):
        await poller.poll(HANDLE, timeout_budget=30)


@pytest.mark.asyncio
async def test_cancellation_before_first_query(recording_sleep: RecordingSleep):
    fetcher = ScriptedStatusFetcher([running()])
    poller = TaskPoller(fetcher, poll_interval=10, sleep=recording_sleep)
    cancel = asyncio.Event()
    cancel.set()

    with pytest.raises(PollCancelledError):
        await poller.poll(HANDLE, timeout_budget=30, cancel_event=cancel)
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_cancellation_interrupts_the_wait():
    cancel = asyncio.Event()

    async def never_ending_sleep(seconds: float) -> None:
        cancel.set()
        await asyncio.Event().wait()

    fetcher = ScriptedStatusFetcher([running()])
    poller = TaskPoller(fetcher, poll_interval=10, sleep=never_ending_sleep)

    with pytest.raises(PollCancelledError) as excinfo:
        await asyncio.wait_for(poller.poll(HANDLE, timeout_budget=3600, cancel_event=cancel), timeout=5)
    assert excinfo.value.attempts == 1


@pytest.mark.asyncio
async def test_check_once_does_a_single_query():
    fetcher = ScriptedStatusFetcher([running()])
    poller = TaskPoller(fetcher)

    outcome = await poller.check_once(HANDLE)

    assert outcome.status is TaskStatus.RUNNING
    assert len(fetcher.calls) == 1


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        TaskPoller(ScriptedStatusFetcher([running()]), poll_interval=0)
