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

"""Fake git backend for tests.

:class:`FakeGit` satisfies the :class:`~bumpcheck.backends.Git` protocol.
Every call is recorded as the ``git`` argument tuple it stands for, so
assertions read like the command line::

    assert ('checkout', 'pr-42-release') in git.calls
"""

from __future__ import annotations

from pathlib import Path

from bumpcheck.backends._run import CommandResult
from bumpcheck.errors import CommandError

OK = CommandResult(command=[], return_code=0, stdout='', stderr='')
"""A successful no-op ``CommandResult`` for use as a default return value."""


class FakeGit:
    """Configurable Git test double.

    Args:
        root: Working directory; the executor writes README and workflow
            files here, so tests pass ``tmp_path``.
        branch: Currently checked-out branch.
        tag: Value of ``latest_tag()`` on branches missing from ``tags``.
        subject: Value of ``latest_subject()`` on branches missing from
            ``subjects``.
        tags: Per-branch ``latest_tag()`` values.
        subjects: Per-branch ``latest_subject()`` values.
        remote: Refs returned by ``remote_refs()``.
        fail_on: Subcommand names (``'push'``, ``'fetch'``, ...) that
            raise :class:`CommandError`.
    """

    def __init__(
        self,
        root: Path,
        *,
        branch: str = 'main',
        tag: str = '',
        subject: str = '',
        tags: dict[str, str] | None = None,
        subjects: dict[str, str] | None = None,
        remote: list[str] | None = None,
        fail_on: set[str] | None = None,
    ) -> None:
        """Initialize with configurable state."""
        self._root = root
        self.branch = branch
        self._tag = tag
        self._subject = subject
        self._tags = tags or {}
        self._subjects = subjects or {}
        self.remote = list(remote or [])
        self.fail_on = fail_on or set()
        self.calls: list[tuple[str, ...]] = []
        self.commits: list[str] = []
        self.deleted_refs: list[str] = []

    @property
    def root(self) -> Path:
        """The repository working directory."""
        return self._root

    def _record(self, *args: str) -> CommandResult:
        self.calls.append(args)
        if args and args[0] in self.fail_on:
            raise CommandError(
                CommandResult(command=['git', *args], return_code=128, stderr=f'fatal: {args[0]} failed'),
            )
        return OK

    def commands(self, name: str) -> list[tuple[str, ...]]:
        """Return the recorded calls for subcommand *name*."""
        return [c for c in self.calls if c and c[0] == name]

    async def run(self, *args: str, suppress_output: bool = False) -> CommandResult:
        """Record an arbitrary command."""
        return self._record(*args)

    async def init(self, branch: str) -> None:
        """Record init and switch to *branch*."""
        self._record('init', '--initial-branch', branch)
        self.branch = branch

    async def add_remote(self, name: str, url: str) -> None:
        """Record remote registration."""
        self._record('remote', 'add', name, url)

    async def set_identity(self, name: str, email: str) -> None:
        """Record identity configuration."""
        self._record('config', 'user.name', name)
        self._record('config', 'user.email', email)

    async def add(self, *paths: str, force: bool = False) -> None:
        """Record staging."""
        self._record('add', *paths, *(['--force'] if force else []))

    async def commit(self, message: str) -> None:
        """Record a commit; it becomes the subject of the current branch."""
        self._record('commit', '--message', message)
        self.commits.append(message)
        self._subjects[self.branch] = message

    async def push(
        self,
        *,
        remote: str = '',
        branch: str = '',
        force: bool = False,
        set_upstream: bool = False,
    ) -> None:
        """Record a push."""
        args = ['push']
        if force:
            args.append('--force')
        if set_upstream:
            args.append('--set-upstream')
        args.extend(a for a in (remote, branch) if a)
        self._record(*args)

    async def fetch(self, remote: str, ref: str) -> None:
        """Record a fetch."""
        self._record('fetch', remote, ref)

    async def checkout(self, branch: str) -> None:
        """Record a checkout and switch branches."""
        self._record('checkout', branch)
        self.branch = branch

    async def pull(self) -> None:
        """Record a pull."""
        self._record('pull')

    async def latest_tag(self) -> str:
        """Return the tag configured for the current branch."""
        self._record('describe', '--tags', '--abbrev=0')
        return self._tags.get(self.branch, self._tag)

    async def latest_subject(self) -> str:
        """Return the subject configured for the current branch."""
        self._record('show', '--no-patch', '--format=%s')
        return self._subjects.get(self.branch, self._subject)

    async def remote_refs(self, remote: str = 'origin') -> list[str]:
        """Return the configured remote refs."""
        self._record('ls-remote', '--tags', '--heads', remote)
        return list(self.remote)

    async def delete_remote_refs(self, refs: list[str], remote: str = 'origin') -> None:
        """Record deletion and drop *refs* from the remote."""
        if not refs:
            return
        self._record('push', remote, '--delete', *refs)
        self.deleted_refs.extend(refs)
        self.remote = [r for r in self.remote if r not in refs]
