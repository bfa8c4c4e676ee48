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

"""Environment-sourced configuration for bumpcheck.

Everything the harness needs to know about the outside world is read once
at startup into a frozen :class:`HarnessConfig`, which is then passed
explicitly to the provisioner and the executor.

Supported variables::

    TEST_REPO                 https://github.com/<owner>/<repo>[.git]  (required)
    TEST_USER                 user that owns TEST_TOKEN                (required)
    TEST_TOKEN                token with contents + actions write      (required)
    BUMPCHECK_SCOPE           base branch for this execution
    BUMPCHECK_WORKDIR         scratch repository path     (./test-repo)
    BUMPCHECK_FIXTURE         suite fixture               (./tests/e2e/config.yaml)
    BUMPCHECK_SOURCE_ROOT     root for actionFiles globs  (.)
    BUMPCHECK_POLL_INTERVAL   seconds between polls       (1.0)
    BUMPCHECK_POLL_TIMEOUT    per-phase guard, 0 = none   (0)
    BUMPCHECK_API_URL         REST API base URL           (https://api.github.com)

Scope resolution: ``BUMPCHECK_SCOPE`` if set, else ``e2e-<GITHUB_RUN_ID>``
inside GitHub Actions, else ``main``.

Usage::

    from bumpcheck.config import load_config

    cfg = load_config()
    print(cfg.scope, cfg.owner, cfg.repo)
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from bumpcheck.errors import E, BumpCheckError
from bumpcheck.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SCOPE = 'main'
DEFAULT_WORKDIR = 'test-repo'
DEFAULT_FIXTURE = 'tests/e2e/config.yaml'
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_API_URL = 'https://api.github.com'

COMMITTER_NAME = 'Automated Version Bump Test'
COMMITTER_EMAIL = 'gh-action-bump-version-test@users.noreply.github.com'

# Branch names become part of ``{scope}-{branch}`` refs and run filters.
_SCOPE_RE = re.compile(r'[A-Za-z0-9][A-Za-z0-9._/-]*')


@dataclass(frozen=True)
class HarnessConfig:
    """Resolved configuration for one harness execution.

    Attributes:
        repo_url: HTTPS URL of the disposable test repository.
        username: User that owns ``token``.
        token: Token embedded in the push URL and sent to the API.
        scope: Base branch name; namespaces branches and run history.
        workdir: Scratch directory the repository is built in.
        fixture_path: YAML suite fixture.
        source_root: Directory the fixture's ``actionFiles`` globs are
            resolved against.
        poll_interval: Seconds between run-status polls.
        poll_timeout: Per-phase polling guard in seconds; ``0`` polls
            until the outer CI job times out.
        api_base_url: GitHub REST API base URL.
        committer_name: ``user.name`` for harness commits.
        committer_email: ``user.email`` for harness commits.
    """

    repo_url: str
    username: str
    token: str = field(repr=False)
    scope: str = DEFAULT_SCOPE
    workdir: Path = field(default_factory=lambda: Path(DEFAULT_WORKDIR))
    fixture_path: Path = field(default_factory=lambda: Path(DEFAULT_FIXTURE))
    source_root: Path = field(default_factory=Path)
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: float = 0.0
    api_base_url: str = DEFAULT_API_URL
    committer_name: str = COMMITTER_NAME
    committer_email: str = COMMITTER_EMAIL

    @property
    def owner(self) -> str:
        """Repository owner parsed from ``repo_url``."""
        return parse_repo_slug(self.repo_url)[0]

    @property
    def repo(self) -> str:
        """Repository name parsed from ``repo_url``."""
        return parse_repo_slug(self.repo_url)[1]

    def authenticated_url(self) -> str:
        """Return ``repo_url`` with ``username:token`` embedded."""
        parts = urlsplit(self.repo_url)
        host = parts.hostname or ''
        if parts.port:
            host = f'{host}:{parts.port}'
        user = quote(self.username, safe='')
        secret = quote(self.token, safe='')
        netloc = f'{user}:{secret}@{host}'
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def parse_repo_slug(url: str) -> tuple[str, str]:
    """Split ``https://host/<owner>/<repo>[.git]`` into ``(owner, repo)``.

    Raises:
        BumpCheckError: If the URL has no owner/repo path.
    """
    path = urlsplit(url).path.strip('/')
    if path.endswith('.git'):
        path = path[: -len('.git')]
    segments = [s for s in path.split('/') if s]
    if len(segments) != 2:
        raise BumpCheckError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'TEST_REPO must look like https://github.com/<owner>/<repo>, got {url!r}',
        )
    return segments[0], segments[1]


def resolve_scope(env: Mapping[str, str]) -> str:
    """Pick the scope identifier for this execution."""
    explicit = env.get('BUMPCHECK_SCOPE', '').strip()
    if explicit:
        return explicit
    run_id = env.get('GITHUB_RUN_ID', '').strip()
    if run_id:
        return f'e2e-{run_id}'
    return DEFAULT_SCOPE


def _require(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, '').strip()
    if not value:
        raise BumpCheckError(
            code=E.CONFIG_MISSING_REQUIRED,
            message=f'{name} is not set.',
            hint='Set TEST_REPO, TEST_USER and TEST_TOKEN (a .env file in the working directory is read too).',
        )
    return value


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, '').strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = -1.0
    if value < 0:
        raise BumpCheckError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'{name} must be a non-negative number of seconds, got {raw!r}',
        )
    return value


def _seconds(name: str, value: float) -> float:
    if value < 0:
        raise BumpCheckError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'{name} must be a non-negative number of seconds, got {value}',
        )
    return value


def check_workdir(workdir: Path, source_root: Path) -> None:
    """Refuse a scratch directory whose wipe would delete *source_root*.

    The workdir is removed recursively before every run, so it must not
    be *source_root* itself or one of its parents.

    Raises:
        BumpCheckError: ``BC-CONFIG-INVALID-VALUE`` on overlap.
    """
    workdir = workdir.resolve()
    source_root = source_root.resolve()
    if workdir == source_root or workdir in source_root.parents:
        raise BumpCheckError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'workdir {workdir} would wipe the action sources in {source_root}',
            hint='Point --workdir (BUMPCHECK_WORKDIR) at a dedicated scratch directory.',
        )


def load_config(
    env: Mapping[str, str] | None = None,
    *,
    scope: str | None = None,
    workdir: Path | None = None,
    fixture_path: Path | None = None,
    source_root: Path | None = None,
    poll_interval: float | None = None,
    poll_timeout: float | None = None,
) -> HarnessConfig:
    """Build a :class:`HarnessConfig` from *env*, applying CLI overrides.

    Args:
        env: Environment mapping; defaults to ``os.environ``.
        scope: Overrides the resolved scope identifier.
        workdir: Overrides ``BUMPCHECK_WORKDIR``.
        fixture_path: Overrides ``BUMPCHECK_FIXTURE``.
        source_root: Overrides ``BUMPCHECK_SOURCE_ROOT``.
        poll_interval: Overrides ``BUMPCHECK_POLL_INTERVAL``.
        poll_timeout: Overrides ``BUMPCHECK_POLL_TIMEOUT``.

    Raises:
        BumpCheckError: If a required variable is missing or a value is
            invalid.
    """
    env = os.environ if env is None else env

    repo_url = _require(env, 'TEST_REPO')
    parse_repo_slug(repo_url)
    username = _require(env, 'TEST_USER')
    token = _require(env, 'TEST_TOKEN')

    resolved_scope = scope or resolve_scope(env)
    if not _SCOPE_RE.fullmatch(resolved_scope):
        raise BumpCheckError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'scope {resolved_scope!r} is not a valid branch name',
        )

    interval = (
        _seconds('--poll-interval', poll_interval)
        if poll_interval is not None
        else _float(env, 'BUMPCHECK_POLL_INTERVAL', DEFAULT_POLL_INTERVAL)
    )
    timeout = (
        _seconds('--poll-timeout', poll_timeout)
        if poll_timeout is not None
        else _float(env, 'BUMPCHECK_POLL_TIMEOUT', 0.0)
    )
    if interval <= 0:
        raise BumpCheckError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'poll interval must be positive, got {interval}',
        )

    config = HarnessConfig(
        repo_url=repo_url,
        username=username,
        token=token,
        scope=resolved_scope,
        workdir=(workdir or Path(env.get('BUMPCHECK_WORKDIR', '') or DEFAULT_WORKDIR)).resolve(),
        fixture_path=(fixture_path or Path(env.get('BUMPCHECK_FIXTURE', '') or DEFAULT_FIXTURE)).resolve(),
        source_root=(source_root or Path(env.get('BUMPCHECK_SOURCE_ROOT', '') or '.')).resolve(),
        poll_interval=interval,
        poll_timeout=timeout,
        api_base_url=env.get('BUMPCHECK_API_URL', '') or DEFAULT_API_URL,
    )
    check_workdir(config.workdir, config.source_root)
    logger.debug('config_loaded', scope=config.scope, repo=f'{config.owner}/{config.repo}', workdir=str(config.workdir))
    return config


__all__ = [
    'COMMITTER_EMAIL',
    'COMMITTER_NAME',
    'DEFAULT_SCOPE',
    'HarnessConfig',
    'check_workdir',
    'load_config',
    'parse_repo_slug',
    'resolve_scope',
]
