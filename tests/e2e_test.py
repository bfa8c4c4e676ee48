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

"""Live end-to-end run against a real GitHub repository.

Skipped unless ``TEST_REPO``, ``TEST_USER`` and ``TEST_TOKEN`` are set
(directly or through ``.env``). Each run force-pushes the scope branch of
that repository and triggers one workflow run per scenario.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from bumpcheck.backends import GitHubActionsClient
from bumpcheck.config import load_config
from bumpcheck.display import build_detail_text
from bumpcheck.executor import run_all
from bumpcheck.fixture import load_fixture
from bumpcheck.logging import configure_logging
from bumpcheck.types import Status
from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

_LIVE = all(os.environ.get(name) for name in ('TEST_REPO', 'TEST_USER', 'TEST_TOKEN'))
_FIXTURE = Path(__file__).parent / 'e2e' / 'config.yaml'

pytestmark = pytest.mark.skipif(not _LIVE, reason='TEST_REPO, TEST_USER and TEST_TOKEN are not set')


class TestLiveRun:
    """Runs every suite in tests/e2e/config.yaml."""

    @pytest.mark.asyncio()
    async def test_all_suites_pass(self, tmp_path: Path) -> None:
        """Every scenario's run succeeds and its state matches."""
        configure_logging(verbose=True)
        config = load_config(workdir=tmp_path / 'test-repo', fixture_path=_FIXTURE)
        actions = GitHubActionsClient(config.owner, config.repo, token=config.token, base_url=config.api_base_url)

        results = await run_all(config, load_fixture(config.fixture_path), actions)

        failures = [
            f'{suite.name} / {scenario.message}: {build_detail_text(scenario)}'
            for suite in results
            for scenario in suite.scenarios
            if scenario.status is not Status.PASSED
        ]
        assert not failures, '\n'.join(failures)
