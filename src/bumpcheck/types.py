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

"""Result types shared by the executor, display and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from bumpcheck.backends.actions import Run
from bumpcheck.expectations import Mismatch, ObservedState


class Status(enum.Enum):
    """Status of a scenario or suite."""

    PENDING = 'pending'
    RUNNING = 'running'
    PASSED = 'passed'
    FAILED = 'failed'
    SKIPPED = 'skipped'


class ScenarioState(enum.Enum):
    """Lifecycle of one scenario, in order."""

    IDLE = 'idle'
    COMMITTED = 'committed'
    PUSHED = 'pushed'
    AWAITING_RUN_START = 'awaiting_run_start'
    AWAITING_RUN_COMPLETION = 'awaiting_run_completion'
    COMPLETED = 'completed'
    VERIFIED = 'verified'
    FAILED = 'failed'


@dataclass
class ScenarioResult:
    """Outcome of one scenario.

    ``state`` ends as ``VERIFIED`` or ``FAILED``; ``failed_at`` keeps the
    last state reached before the failure, e.g. ``AWAITING_RUN_START``
    when the run never appeared.
    """

    message: str
    state: ScenarioState = ScenarioState.IDLE
    failed_at: ScenarioState | None = None
    status: Status = Status.PENDING
    run: Run | None = None
    observed: ObservedState | None = None
    mismatches: list[Mismatch] = field(default_factory=list)
    error_code: str = ''
    error_message: str = ''
    elapsed_s: float = 0.0


@dataclass
class SuiteResult:
    """Outcome of one suite."""

    name: str
    scenarios: list[ScenarioResult] = field(default_factory=list)

    @property
    def status(self) -> Status:
        """``FAILED`` if any scenario failed, else ``PASSED``."""
        if any(s.status is Status.FAILED for s in self.scenarios):
            return Status.FAILED
        return Status.PASSED

    @property
    def ok(self) -> bool:
        """Whether every scenario passed."""
        return self.status is Status.PASSED


__all__ = [
    'ScenarioResult',
    'ScenarioState',
    'Status',
    'SuiteResult',
]
