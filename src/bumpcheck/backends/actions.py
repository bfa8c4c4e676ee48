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

"""GitHub Actions run-status client for bumpcheck.

Implements the :class:`~bumpcheck.backends.RunStatus` protocol using the
GitHub REST API v3 via ``httpx``:

- ``most_recent_run``: ``GET /repos/{owner}/{repo}/actions/runs?per_page=1``
- ``get_run``:         ``GET /repos/{owner}/{repo}/actions/runs/{id}``
- ``clear_runs``:      list every run, then ``DELETE .../actions/runs/{id}``

"No runs yet" is a normal answer (``None``), distinct from a failure.
Every failure raises :class:`~bumpcheck.errors.TransportError` and is
never retried here.

Usage::

    from bumpcheck.backends.actions import GitHubActionsClient

    actions = GitHubActionsClient(owner='octo', repo='bump-test', token=token)
    run = await actions.most_recent_run('main')

.. seealso::

    `Workflow runs API <https://docs.github.com/en/rest/actions/workflow-runs>`_
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx

from bumpcheck.errors import TransportError
from bumpcheck.logging import get_logger
from bumpcheck.net import DEFAULT_POOL_SIZE, DEFAULT_TIMEOUT, http_client, send

log = get_logger('bumpcheck.backends.actions')

_DEFAULT_BASE_URL = 'https://api.github.com'

_API_VERSION = '2022-11-28'

# Largest page the runs endpoint accepts.
_PAGE_SIZE = 100

# Sentinel high-water mark used when a scope has no runs at all.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

COMPLETED = 'completed'
SUCCESS = 'success'


@dataclass(frozen=True)
class Run:
    """A workflow run as observed through the API.

    Attributes:
        id: Provider-assigned run identifier.
        created_at: Creation time (timezone-aware, UTC).
        status: ``queued``, ``in_progress``, ``completed``, ...
        conclusion: ``success``, ``failure``, ... or ``None`` until the
            run is completed.
        head_branch: Branch whose push triggered the run.
        html_url: Link to the run page.
    """

    id: int
    created_at: datetime
    status: str
    conclusion: str | None = None
    head_branch: str = ''
    html_url: str = ''

    @property
    def completed(self) -> bool:
        """Whether the run reached its terminal status."""
        return self.status == COMPLETED

    @property
    def succeeded(self) -> bool:
        """Whether the run completed with a ``success`` conclusion."""
        return self.completed and self.conclusion == SUCCESS


def parse_timestamp(value: str) -> datetime:
    """Parse an API timestamp such as ``2026-03-01T12:00:00Z``."""
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_run(data: dict[str, Any]) -> Run:
    """Build a :class:`Run` from a ``workflow_run`` JSON object.

    Raises:
        TransportError: If a required field is missing or malformed.
    """
    try:
        return Run(
            id=int(data['id']),
            created_at=parse_timestamp(str(data['created_at'])),
            status=str(data['status']),
            conclusion=data.get('conclusion'),
            head_branch=data.get('head_branch') or '',
            html_url=data.get('html_url') or '',
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise TransportError(f'malformed workflow run payload: {exc}') from exc


def _json(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body.

    Raises:
        TransportError: If the body is not a JSON object.
    """
    where = f'{response.request.method} {response.request.url}'
    try:
        data = response.json()
    except ValueError as exc:
        msg = f'malformed JSON from {where}: {response.text[:80]!r}'
        raise TransportError(msg, status=response.status_code) from exc
    if not isinstance(data, dict):
        msg = f'expected a JSON object from {where}, got {type(data).__name__}'
        raise TransportError(msg, status=response.status_code)
    return data


class GitHubActionsClient:
    """Run-status client for one GitHub repository.

    Args:
        owner: Repository owner.
        repo: Repository name.
        token: API token with ``actions:write`` on the repository.
        base_url: API base URL (override for GitHub Enterprise Server).
        pool_size: HTTP connection pool size.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        *,
        token: str,
        base_url: str = _DEFAULT_BASE_URL,
        pool_size: int = DEFAULT_POOL_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize with owner, repo, and API token."""
        if not token:
            msg = 'GitHub API token required: pass token= (TEST_TOKEN).'
            raise ValueError(msg)
        self._owner = owner
        self._repo = repo
        self._base_url = base_url.rstrip('/')
        self._runs_url = f'{self._base_url}/repos/{owner}/{repo}/actions/runs'
        self._pool_size = pool_size
        self._timeout = timeout
        self._headers = {
            'Authorization': f'Bearer {token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': _API_VERSION,
        }

    def __repr__(self) -> str:
        """Return a safe repr that never exposes the API token."""
        return f'GitHubActionsClient(owner={self._owner!r}, repo={self._repo!r})'

    def _client(self) -> AbstractAsyncContextManager[httpx.AsyncClient]:
        """Open a pooled client carrying the auth headers."""
        return http_client(pool_size=self._pool_size, timeout=self._timeout, headers=self._headers)

    @staticmethod
    def _list_params(branch: str | None, per_page: int, page: int = 1) -> dict[str, str | int]:
        params: dict[str, str | int] = {'per_page': per_page, 'page': page}
        if branch:
            params['branch'] = branch
        return params

    async def most_recent_run(self, branch: str | None = None) -> Run | None:
        """Return the newest run (optionally only for *branch*), or ``None``."""
        async with self._client() as client:
            response = await send(client, 'GET', self._runs_url, params=self._list_params(branch, 1))
        runs = _json(response).get('workflow_runs') or []
        if not runs:
            log.debug('no_runs', branch=branch)
            return None
        return parse_run(runs[0])

    async def get_run(self, run_id: int) -> Run:
        """Return the current state of run *run_id*."""
        async with self._client() as client:
            response = await send(client, 'GET', f'{self._runs_url}/{run_id}')
        return parse_run(_json(response))

    async def clear_runs(self, branch: str | None = None) -> int:
        """Delete every run (optionally only for *branch*).

        Returns:
            The number of runs deleted.
        """
        async with self._client() as client:
            run_ids: list[int] = []
            page = 1
            while True:
                response = await send(
                    client,
                    'GET',
                    self._runs_url,
                    params=self._list_params(branch, _PAGE_SIZE, page),
                )
                batch = _json(response).get('workflow_runs') or []
                try:
                    run_ids.extend(int(r['id']) for r in batch)
                except (KeyError, TypeError, ValueError) as exc:
                    raise TransportError(f'malformed workflow run list: {exc}') from exc
                if len(batch) < _PAGE_SIZE:
                    break
                page += 1

            for run_id in run_ids:
                await send(client, 'DELETE', f'{self._runs_url}/{run_id}')

        log.info('runs_cleared', branch=branch, count=len(run_ids))
        return len(run_ids)


__all__ = [
    'COMPLETED',
    'EPOCH',
    'SUCCESS',
    'GitHubActionsClient',
    'Run',
    'parse_run',
    'parse_timestamp',
]
