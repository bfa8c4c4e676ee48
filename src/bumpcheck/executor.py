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

"""Suite executor: push scenario commits and verify what the action did.

Scenario lifecycle::

    IDLE ──commit──► COMMITTED ──push──► PUSHED
      ──► AWAITING_RUN_START       (poll newest run until created > mark)
      ──► AWAITING_RUN_COMPLETION  (poll run until status == completed)
      ──► COMPLETED                (conclusion == success, else FAILED)
      ──► VERIFIED                 (version / tag / subject match)

The high-water mark is taken *before* the push, so the run the push
triggers is always strictly newer than it. Runs are never matched by
commit SHA.

Scenarios build on each other: nothing is rolled back between them. A
failed scenario fails its suite and the rest of that suite is skipped;
later suites still run from the base branch.

Usage::

    from bumpcheck.executor import run_all

    results = await run_all(config, fixture, actions)
    ok = all(r.ok for r in results)
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime

from bumpcheck.backends import Git, Manifest, RunStatus
from bumpcheck.backends.actions import EPOCH, Run
from bumpcheck.config import HarnessConfig
from bumpcheck.errors import AssertionMismatch, BumpCheckError, ConclusionFailure, TransportError
from bumpcheck.expectations import Expectation, ObservedState, Verdict, branch_ref, evaluate
from bumpcheck.fixture import Fixture, Scenario, Suite
from bumpcheck.logging import get_logger, scenario_context
from bumpcheck.poll import Clock, Sleep, poll_until
from bumpcheck.provision import RepositoryProvisioner
from bumpcheck.report import README_PATH, WORKFLOW_PATH, dump_workflow, render_report
from bumpcheck.types import ScenarioResult, ScenarioState, Status, SuiteResult

log = get_logger('bumpcheck.executor')


class SuiteExecutor:
    """Runs suites against an already provisioned repository.

    Args:
        config: Harness configuration (scope, poll interval and guard).
        git: Git backend for the scratch repository.
        actions: Run-status client.
        manifest: Manifest backend for reading the bumped version.
        sleep: Async sleep used between polls.
        clock: Monotonic clock for the poll guard and timings.
    """

    def __init__(
        self,
        config: HarnessConfig,
        git: Git,
        actions: RunStatus,
        manifest: Manifest,
        *,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize with configuration and backends."""
        self._config = config
        self._git = git
        self._actions = actions
        self._manifest = manifest
        self._sleep = sleep
        self._clock = clock

    @property
    def scope(self) -> str:
        """The base branch every suite starts from."""
        return self._config.scope

    async def high_water_mark(self) -> datetime:
        """Creation time of the newest run on the scope, or :data:`EPOCH`."""
        run = await self._actions.most_recent_run(self.scope)
        return run.created_at if run is not None else EPOCH

    async def await_run_start(self, mark: datetime) -> Run:
        """Poll until a run created strictly after *mark* exists."""
        result = await poll_until(
            lambda: self._actions.most_recent_run(self.scope),
            lambda run: run is not None and run.created_at > mark,
            interval=self._config.poll_interval,
            timeout=self._config.poll_timeout,
            phase='run_start',
            sleep=self._sleep,
            clock=self._clock,
        )
        run = result.unwrap()
        if run is None:
            raise TransportError(f'{self.scope}: run_start resolved without a run')
        log.info('run_started', run_id=run.id, created_at=run.created_at.isoformat(), attempts=result.attempts)
        return run

    async def await_run_completion(self, run: Run) -> Run:
        """Poll *run* until its status is ``completed``."""
        result = await poll_until(
            lambda: self._actions.get_run(run.id),
            lambda current: current.completed,
            interval=self._config.poll_interval,
            timeout=self._config.poll_timeout,
            phase='run_completion',
            sleep=self._sleep,
            clock=self._clock,
        )
        completed = result.unwrap()
        log.info('run_completed', run_id=completed.id, conclusion=completed.conclusion, attempts=result.attempts)
        return completed

    async def read_state(self) -> ObservedState:
        """Read version, latest tag and HEAD subject concurrently."""
        version, tag, message = await asyncio.gather(
            self._manifest.version(),
            self._git.latest_tag(),
            self._git.latest_subject(),
        )
        return ObservedState(version=version, tag=tag, message=message)

    async def verify(self, expected: Expectation) -> tuple[ObservedState, Verdict]:
        """Check out the expected branch, read state back and compare.

        Raises:
            AssertionMismatch: If any compared field differs.
        """
        branch = branch_ref(self.scope, expected.branch) if expected.branch else None
        if branch:
            await self._git.fetch('origin', branch)
            await self._git.checkout(branch)
        try:
            await self._git.pull()
            observed = await self.read_state()
            verdict = evaluate(observed, expected)
        finally:
            if branch:
                await self._git.checkout(self.scope)
        if not verdict.ok:
            raise AssertionMismatch(verdict.mismatches)
        return observed, verdict

    async def _write(self, path: str, content: str) -> None:
        target = self._git.root / path
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_text, content, encoding='utf-8')
        await self._git.add(path, force=True)

    async def run_scenario(self, scenario: Scenario, workflow_text: str) -> ScenarioResult:
        """Commit, push and verify one scenario.

        :class:`~bumpcheck.errors.BumpCheckError` failures are recorded on
        the returned result; anything else propagates.
        """
        result = ScenarioResult(message=scenario.message, status=Status.RUNNING)
        start = self._clock()
        with scenario_context(scenario=scenario.message):
            await self._run_steps(scenario, workflow_text, result)
        result.elapsed_s = self._clock() - start
        return result

    async def _run_steps(self, scenario: Scenario, workflow_text: str, result: ScenarioResult) -> None:
        log.info('scenario_start')
        try:
            await self._write(str(README_PATH), render_report(workflow_text, scenario.message, scenario.expected))
            await self._git.commit(scenario.message)
            result.state = ScenarioState.COMMITTED

            mark = await self.high_water_mark()
            log.debug('high_water_mark', mark=mark.isoformat())
            await self._git.push()
            result.state = ScenarioState.PUSHED

            result.state = ScenarioState.AWAITING_RUN_START
            run = await self.await_run_start(mark)
            result.run = run

            result.state = ScenarioState.AWAITING_RUN_COMPLETION
            run = await self.await_run_completion(run)
            result.run = run
            result.state = ScenarioState.COMPLETED

            if not run.succeeded:
                raise ConclusionFailure(run.id, run.conclusion, run.html_url)

            result.observed, _ = await self.verify(scenario.expected)
            result.state = ScenarioState.VERIFIED
            result.status = Status.PASSED
        except BumpCheckError as exc:
            result.failed_at = result.state
            result.state = ScenarioState.FAILED
            result.status = Status.FAILED
            result.error_code = exc.code.value
            result.error_message = exc.info.message
            if isinstance(exc, AssertionMismatch):
                result.mismatches = list(exc.mismatches)
            log.warning('scenario_failed', code=exc.code.value, failed_at=result.failed_at.value)
        else:
            log.info('scenario_passed', run_id=run.id)

    async def run_suite(self, suite: Suite) -> SuiteResult:
        """Install the suite's workflow and run its scenarios in order."""
        with scenario_context(suite=suite.name):
            return await self._run_suite(suite)

    async def _run_suite(self, suite: Suite) -> SuiteResult:
        log.info('suite_start', scenarios=len(suite.scenarios))
        await self._git.checkout(self.scope)
        workflow_text = dump_workflow(suite.workflow)
        await self._write(str(WORKFLOW_PATH), workflow_text)

        outcome = SuiteResult(name=suite.name)
        failed = False
        for scenario in suite.scenarios:
            if failed:
                outcome.scenarios.append(ScenarioResult(message=scenario.message, status=Status.SKIPPED))
                continue
            result = await self.run_scenario(scenario, workflow_text)
            outcome.scenarios.append(result)
            failed = result.status is Status.FAILED

        log.info('suite_done', status=outcome.status.value)
        return outcome


async def run_all(
    config: HarnessConfig,
    fixture: Fixture,
    actions: RunStatus,
    *,
    git: Git | None = None,
    manifest: Manifest | None = None,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = time.monotonic,
) -> list[SuiteResult]:
    """Provision the test repository, then run every suite in order.

    Raises:
        ProvisioningError: If the repository could not be built; no
            suite runs in that case.
    """
    provisioner = RepositoryProvisioner(config, actions, git=git, manifest=manifest)
    repo = await provisioner.provision(fixture.action_files)
    executor = SuiteExecutor(config, repo, actions, provisioner.manifest, sleep=sleep, clock=clock)
    results: list[SuiteResult] = []
    for suite in fixture.suites:
        results.append(await executor.run_suite(suite))
    return results


__all__ = [
    'SuiteExecutor',
    'run_all',
]
