"""
poller.py

Drives a remote asynchronous task (clouddriver operation) to a terminal
status under a hard timeout budget.

The budget is spent one poll interval per tick, whether or not the status
query of that tick succeeded, so the loop always terminates. Sleeping goes
through an injected coroutine so tests can run the loop on a simulated clock.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type

import httpx

from lambdaroute.core.exceptions import PollCancelledError, TaskTimeoutError, TransientStatusError
from lambdaroute.interfaces.collaborators import StatusFetcher
from lambdaroute.interfaces.types.task import TaskHandle, TaskOutcome
from lambdaroute.shared.app_config import DEFAULT_POLL_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_ERRORS: Tuple[Type[BaseException], ...] = (TransientStatusError, httpx.TransportError)


class TaskPoller:
    def __init__(
        self,
        status_fetcher: StatusFetcher,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.status_fetcher = status_fetcher
        self.poll_interval = poll_interval
        self._sleep = sleep

    async def check_once(self, handle: TaskHandle) -> TaskOutcome:
        """Single status query, no loop and no error absorption."""
        return await self.status_fetcher.fetch_status(handle)

    async def poll(
        self,
        handle: TaskHandle,
        timeout_budget: float,
        poll_interval: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> TaskOutcome:
        interval = poll_interval if poll_interval is not None else self.poll_interval
        if interval <= 0:
            raise ValueError("poll_interval must be positive")

        remaining = timeout_budget
        attempts = 0
        cancelled = False
        logger.debug(f"Polling task {handle.url} (budget {timeout_budget}s, interval {interval}s)")

        while remaining > 0:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break

            attempts += 1
            outcome: Optional[TaskOutcome] = None
            try:
                outcome = await self.status_fetcher.fetch_status(handle)
            except TRANSIENT_STATUS_ERRORS as e:
                logger.warning(f"Status query {attempts} for task {handle.url} failed, will retry: {e}")

            if outcome is not None and outcome.status.is_terminal:
                logger.info(f"Task {handle.url} reached {outcome.status.value} after {attempts} status query(ies)")
                return outcome

            if not await self._wait(interval, cancel_event):
                cancelled = True
                break
            remaining -= interval

        if cancelled:
            logger.warning(f"Polling of task {handle.url} cancelled after {attempts} status query(ies)")
            raise PollCancelledError(attempts=attempts)

        logger.error(f"Task {handle.url} did not reach a terminal status within {timeout_budget}s ({attempts} status queries)")
        raise TaskTimeoutError(attempts=attempts)

    async def _wait(self, interval: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """Sleeps one interval. Returns False if cancellation was signalled meanwhile."""
        if cancel_event is None:
            await self._sleep(interval)
            return True

        sleeper = asyncio.ensure_future(self._sleep(interval))
        canceller = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, canceller}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (sleeper, canceller):
                if not pending.done():
                    pending.cancel()
        return not cancel_event.is_set()
