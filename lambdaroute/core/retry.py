"""
retry.py

Bounded retry for transient infrastructure failures (artifact store I/O).
Domain failures such as a content mismatch must not be routed through here.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_incrementing,
)

from .exceptions import ArtifactFetchError, RetriesExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    def __init__(
        self,
        max_attempts: int,
        delay: float,
        exponential: bool = False,
        retry_on: Tuple[Type[BaseException], ...] = (ArtifactFetchError,),
        overall_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if overall_timeout is not None and overall_timeout <= 0:
            raise ValueError("overall_timeout must be positive")
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.max_attempts = max_attempts
        self.delay = delay
        self.exponential = exponential
        self.retry_on = retry_on
        self.overall_timeout = overall_timeout
        self._sleep = sleep

    def _wait_strategy(self):
        if self.exponential:
            return wait_exponential(multiplier=self.delay)
        # Sleep before attempt n (n >= 2) is delay * n.
        return wait_incrementing(start=self.delay * 2, increment=self.delay)

    def _stop_strategy(self):
        stop = stop_after_attempt(self.max_attempts)
        if self.overall_timeout is not None:
            stop = stop | stop_after_delay(self.overall_timeout)
        return stop

    async def execute(self, op: Callable[[], Awaitable[T]]) -> T:
        retrying = AsyncRetrying(
            stop=self._stop_strategy(),
            wait=self._wait_strategy(),
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=False,
        )
        attempts = 0

        async def _attempt() -> T:
            nonlocal attempts
            attempts += 1
            return await op()

        try:
            if self.overall_timeout is None:
                return await retrying(_attempt)
            # stop_after_delay is only checked between attempts.
            return await asyncio.wait_for(retrying(_attempt), timeout=self.overall_timeout)
        except RetryError as e:
            last_attempt = e.last_attempt
            last_error = last_attempt.exception()
            logger.error(f"Retries exhausted after {last_attempt.attempt_number} attempt(s): {last_error}")
            raise RetriesExhaustedError(last_attempt.attempt_number, last_error) from last_error
        except asyncio.TimeoutError as e:
            timeout_error = asyncio.TimeoutError(f"overall timeout of {self.overall_timeout}s exceeded")
            logger.error(f"Retries abandoned during attempt {attempts}: {timeout_error}")
            raise RetriesExhaustedError(attempts, timeout_error) from e


async def execute(
    op: Callable[[], Awaitable[T]],
    max_attempts: int,
    delay: float,
    exponential: bool = False,
    **kwargs,
) -> T:
    return await RetryPolicy(max_attempts, delay, exponential, **kwargs).execute(op)
