# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Fixed-interval polling with an injected clock and sleep.

:func:`poll_until` calls ``fetch`` until ``accept`` holds for its value,
sleeping ``interval`` seconds between attempts. It stops on one of:

- the condition holding → :attr:`PollOutcome.RESOLVED`
- ``fetch`` raising a :class:`~bumpcheck.errors.BumpCheckError`
  → :attr:`PollOutcome.FAILED` (the error is kept, not retried)
- the optional ``timeout`` guard elapsing → :attr:`PollOutcome.TIMED_OUT`

``timeout=0`` disables the guard; the caller's own deadline (usually the
CI job timeout) then bounds the wait.

Usage::

    result = await poll_until(
        lambda: actions.get_run(run_id),
        lambda run: run.completed,
        interval=1.0,
        phase='run_completion',
    )
    run = result.unwrap()
"""

from __future__ import annotations

import asyncio
import enum
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from bumpcheck.errors import BumpCheckError, RunTimeoutError
from bumpcheck.logging import get_logger

log = get_logger('bumpcheck.poll')

T = TypeVar('T')

Sleep = Callable[[float], Awaitable[object]]
Clock = Callable[[], float]


class PollOutcome(enum.Enum):
    """How a polling loop ended."""

    RESOLVED = 'resolved'
    TIMED_OUT = 'timed_out'
    FAILED = 'failed'


@dataclass(frozen=True)
class PollResult(Generic[T]):
    """Result of :func:`poll_until`.

    Attributes:
        outcome: How the loop ended.
        phase: Label used in logs and timeout errors.
        attempts: Number of ``fetch`` calls made.
        elapsed: Seconds on the injected clock.
        value: The accepted value (``RESOLVED`` only).
        error: The error ``fetch`` raised (``FAILED`` only).
    """

    outcome: PollOutcome
    phase: str
    attempts: int
    elapsed: float
    value: T | None = None
    error: BumpCheckError | None = None

    @property
    def ok(self) -> bool:
        """Whether the condition was met."""
        return self.outcome is PollOutcome.RESOLVED

    def unwrap(self) -> T:
        """Return the accepted value or raise the reason it is missing.

        Raises:
            BumpCheckError: The original ``fetch`` error for ``FAILED``.
            RunTimeoutError: For ``TIMED_OUT``.
        """
        if self.outcome is PollOutcome.FAILED and self.error is not None:
            raise self.error
        if self.outcome is PollOutcome.TIMED_OUT:
            raise RunTimeoutError(self.phase, self.attempts, self.elapsed)
        return self.value  # type: ignore[return-value]


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    accept: Callable[[T], bool],
    *,
    interval: float,
    timeout: float = 0.0,
    phase: str = 'poll',
    sleep: Sleep = asyncio.sleep,
    clock: Clock = time.monotonic,
) -> PollResult[T]:
    """Poll ``fetch`` until ``accept(value)`` is true.

    Args:
        fetch: Coroutine factory returning the current observation.
        accept: Predicate over the observation.
        interval: Fixed seconds between attempts (no backoff).
        timeout: Guard in seconds; ``0`` polls forever.
        phase: Label for logs and :class:`RunTimeoutError`.
        sleep: Async sleep, replaced in tests.
        clock: Monotonic clock, replaced in tests.

    Returns:
        A :class:`PollResult`. Errors other than
        :class:`~bumpcheck.errors.BumpCheckError` propagate.
    """
    start = clock()
    attempt = 0
    while True:
        attempt += 1
        try:
            value = await fetch()
        except BumpCheckError as exc:
            elapsed = clock() - start
            log.warning('poll_failed', phase=phase, attempt=attempt, error=str(exc))
            return PollResult(PollOutcome.FAILED, phase, attempt, elapsed, error=exc)

        elapsed = clock() - start
        if accept(value):
            log.debug('poll_resolved', phase=phase, attempts=attempt, elapsed=round(elapsed, 3))
            return PollResult(PollOutcome.RESOLVED, phase, attempt, elapsed, value=value)

        if timeout > 0 and elapsed >= timeout:
            log.warning('poll_timeout', phase=phase, attempts=attempt, timeout=timeout)
            return PollResult(PollOutcome.TIMED_OUT, phase, attempt, elapsed)

        log.debug('poll_waiting', phase=phase, attempt=attempt, wait=interval)
        await sleep(interval)


__all__ = [
    'PollOutcome',
    'PollResult',
    'poll_until',
]
