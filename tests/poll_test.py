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

"""Tests for bumpcheck.poll."""

from __future__ import annotations

import pytest
from bumpcheck.errors import RunTimeoutError, TransportError
from bumpcheck.poll import PollOutcome, poll_until


class _Script:
    """Returns scripted values one call at a time."""

    def __init__(self, *values: object) -> None:
        self.values = list(values)
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        value = self.values.pop(0)
        if isinstance(value, Exception):
            raise value
        return value


async def _no_sleep(seconds: float) -> None:
    return None


class TestPollUntil:
    """Tests for poll_until."""

    @pytest.mark.asyncio()
    async def test_resolves_first_try_without_sleeping(self) -> None:
        """An immediately true condition never sleeps."""
        slept: list[float] = []

        async def sleep(seconds: float) -> None:
            slept.append(seconds)

        result = await poll_until(_Script(5), lambda v: v == 5, interval=1.0, sleep=sleep, clock=lambda: 0.0)

        assert result.outcome is PollOutcome.RESOLVED
        assert result.ok
        assert result.unwrap() == 5
        assert result.attempts == 1
        assert slept == []

    @pytest.mark.asyncio()
    async def test_fixed_interval(self) -> None:
        """Every wait uses the same interval."""
        slept: list[float] = []

        async def sleep(seconds: float) -> None:
            slept.append(seconds)

        fetch = _Script(1, 2, 3, 4)
        result = await poll_until(fetch, lambda v: v >= 4, interval=2.5, sleep=sleep, clock=lambda: 0.0)

        assert result.unwrap() == 4
        assert result.attempts == 4
        assert slept == [2.5, 2.5, 2.5]

    @pytest.mark.asyncio()
    async def test_error_fails_without_retry(self) -> None:
        """A fetch error ends polling and is re-raised by unwrap."""
        err = TransportError('boom')
        fetch = _Script(None, err, 'never')
        result = await poll_until(fetch, lambda v: v is not None, interval=1.0, sleep=_no_sleep, clock=lambda: 0.0)

        assert result.outcome is PollOutcome.FAILED
        assert result.error is err
        assert fetch.calls == 2
        with pytest.raises(TransportError):
            result.unwrap()

    @pytest.mark.asyncio()
    async def test_unexpected_errors_propagate(self) -> None:
        """Non-harness exceptions are not captured."""
        with pytest.raises(ZeroDivisionError):
            await poll_until(_Script(ZeroDivisionError()), bool, interval=1.0, sleep=_no_sleep, clock=lambda: 0.0)

    @pytest.mark.asyncio()
    async def test_timeout_guard(self) -> None:
        """The guard stops polling once the clock passes the timeout."""
        ticks = iter([0.0, 1.0, 2.0, 3.0, 4.0])
        fetch = _Script(False, False, False, False)
        result = await poll_until(
            fetch,
            bool,
            interval=1.0,
            timeout=2.0,
            phase='run_start',
            sleep=_no_sleep,
            clock=lambda: next(ticks),
        )

        assert result.outcome is PollOutcome.TIMED_OUT
        assert result.attempts == 2
        with pytest.raises(RunTimeoutError, match='run_start'):
            result.unwrap()

    @pytest.mark.asyncio()
    async def test_zero_timeout_never_times_out(self) -> None:
        """timeout=0 disables the guard however much time passes."""
        ticks = iter([0.0, 1e6, 2e6, 3e6])
        result = await poll_until(
            _Script(False, False, True),
            bool,
            interval=1.0,
            timeout=0.0,
            sleep=_no_sleep,
            clock=lambda: next(ticks),
        )
        assert result.ok
