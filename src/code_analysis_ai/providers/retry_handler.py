"""Retry handler with exponential backoff for rate-limited provider calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    """Only errors flagged retryable (rate limit / quota) are retried."""
    return bool(getattr(exc, "retryable", False))


class RetryHandler:
    """Bounded exponential backoff around a single provider call.

    After failed attempt ``k`` the handler sleeps ``base_delay * multiplier ** (k - 1)``
    seconds (1s, 2s, 4s, ... with the defaults) and tries again, up to
    ``max_attempts`` attempts in total. Non-retryable errors propagate immediately and
    the final retryable error propagates unchanged once the budget is spent.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        multiplier: float = 2.0,
        retry_on: Callable[[BaseException], bool] = is_retryable,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize retry handler.

        Args:
            max_attempts: Total attempts including the first one
            base_delay: Delay after the first failed attempt, in seconds
            max_delay: Upper bound for a single delay
            multiplier: Growth factor between consecutive delays
            retry_on: Predicate selecting which exceptions are retried
            sleep: Awaitable sleep, defaults to ``asyncio.sleep`` (cancellable)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.multiplier = multiplier
        self.retry_on = retry_on
        self._sleep = sleep or asyncio.sleep

    async def execute(
        self,
        func: Callable[..., Awaitable[T]],
        *args,
        on_retry: Optional[Callable[[BaseException, int, float], None]] = None,
        **kwargs,
    ) -> T:
        """Execute coroutine function with retry logic."""

        def before_sleep(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.warning(
                f"Attempt {retry_state.attempt_number}/{self.max_attempts} rate limited, "
                f"retrying in {delay:.1f}s",
                extra={"attempt": retry_state.attempt_number, "delay": delay},
            )
            if on_retry and exc is not None:
                on_retry(exc, retry_state.attempt_number, delay)

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.base_delay,
                exp_base=self.multiplier,
                min=0,
                max=self.max_delay,
            ),
            retry=retry_if_exception(self.retry_on),
            before_sleep=before_sleep,
            sleep=self._sleep,
            reraise=True,
        ):
            with attempt:
                return await func(*args, **kwargs)

        # This should never be reached
        raise RuntimeError("Retry loop completed without returning")
