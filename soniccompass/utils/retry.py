"""Bounded retry with linear backoff.

A single, generic retry policy used by every HTTP call that needs one.
Attempts run strictly one after another, never in parallel; the delay
before retry *n* is ``backoff_base * n`` seconds (1 s, then 2 s with the
defaults).

Only :class:`~soniccompass.utils.errors.TransientNetworkError` is retried.
Anything else (a missing key, an empty geocoding result, a malformed body)
propagates on the first attempt because repeating the call cannot fix it.

The ``sleep`` coroutine is injectable so tests can substitute a fake clock
and assert on the exact delays without waiting for them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import structlog

from soniccompass.utils.errors import TransientNetworkError
from soniccompass.utils.logging import get_logger

_T = TypeVar("_T")

MAX_RETRIES = 2
BACKOFF_BASE_SECONDS = 1.0

_logger: structlog.BoundLogger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to retry and how long to wait in between.

    Attributes
    ----------
    max_retries:
        Additional attempts after the first one (total = ``max_retries + 1``).
    backoff_base:
        Seconds multiplied by the 1-based attempt index to get the delay.
    sleep:
        Coroutine function used to wait; ``asyncio.sleep`` in production.
    """

    max_retries: int = MAX_RETRIES
    backoff_base: float = BACKOFF_BASE_SECONDS
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, compare=False)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.backoff_base < 0:
            raise ValueError(f"backoff_base must be >= 0, got {self.backoff_base}")

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Return the delay in seconds after failed *attempt* (1-based)."""
        return self.backoff_base * attempt

    async def run(
        self,
        fn: Callable[[], Awaitable[_T]],
        label: str = "request",
    ) -> _T:
        """Call *fn* until it succeeds or the attempts are used up.

        Parameters
        ----------
        fn:
            Zero-argument coroutine function performing one attempt.
        label:
            Name used in log events (e.g. ``"opencage_geocode"``).

        Returns
        -------
        The value returned by the first successful attempt.

        Raises
        ------
        TransientNetworkError
            After the final attempt fails, carrying that failure's message.
        """
        last_error: TransientNetworkError | None = None

        for attempt in range(1, self.total_attempts + 1):
            try:
                return await fn()
            except TransientNetworkError as exc:
                last_error = exc
                _logger.warning(
                    "retry_attempt_failed",
                    label=label,
                    attempt=attempt,
                    max_attempts=self.total_attempts,
                    error=str(exc),
                )
                if attempt < self.total_attempts:
                    await self.sleep(self.delay_for(attempt))

        if last_error is None:
            raise ValueError(f"{label}: retry policy made no attempts")
        _logger.error(
            "retry_exhausted",
            label=label,
            attempts=self.total_attempts,
            error=str(last_error),
        )
        raise TransientNetworkError(
            message=(
                f"{label} failed after {self.total_attempts} attempts: "
                f"{last_error.message}"
            ),
            provider_name=last_error.provider_name,
            status=last_error.status,
        ) from last_error
