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

"""Git backend for bumpcheck.

The :class:`GitCLIBackend` implements the :class:`~bumpcheck.backends.Git`
protocol by delegating to ``git`` via :func:`run_command`, always inside
the scratch repository passed at construction.

All methods are async: blocking subprocess calls are dispatched to
``asyncio.to_thread()`` to avoid blocking the event loop. Every command
is checked, so a nonzero exit raises
:class:`~bumpcheck.errors.CommandError`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from bumpcheck.backends._run import CommandResult, run_command
from bumpcheck.logging import get_logger

log = get_logger('bumpcheck.backends.git')


class GitCLIBackend:
    """Default :class:`~bumpcheck.backends.Git` implementation using ``git``.

    Args:
        repo_root: Path to the scratch repository.
    """

    def __init__(self, repo_root: Path) -> None:
        """Initialize with the repository root path."""
        self._root = repo_root

    @property
    def root(self) -> Path:
        """The repository working directory."""
        return self._root

    async def run(self, *args: str, suppress_output: bool = False) -> CommandResult:
        """Run ``git <args>`` and echo its output.

        Args:
            *args: Arguments passed to ``git``.
            suppress_output: Log the output at debug instead of info.
                Capture is unaffected.
        """
        return await asyncio.to_thread(
            run_command,
            ['git', *args],
            cwd=self._root,
            check=True,
            quiet=suppress_output,
        )

    async def init(self, branch: str) -> None:
        """Create the repository with *branch* as the initial branch."""
        await self.run('init', '--initial-branch', branch)

    async def add_remote(self, name: str, url: str) -> None:
        """Register a remote."""
        await self.run('remote', 'add', name, url)

    async def set_identity(self, name: str, email: str) -> None:
        """Configure the committer identity for this repository only."""
        await self.run('config', 'user.name', name)
        await self.run('config', 'user.email', email)

    async def add(self, *paths: str, force: bool = False) -> None:
        """Stage *paths*; ``force`` overrides ignore rules."""
        cmd_parts = ['add', *paths]
        if force:
            cmd_parts.append('--force')
        await self.run(*cmd_parts)

    async def commit(self, message: str) -> None:
        """Commit the staged changes."""
        log.info('commit', message=message[:80])
        await self.run('commit', '--message', message)

    async def push(
        self,
        *,
        remote: str = '',
        branch: str = '',
        force: bool = False,
        set_upstream: bool = False,
    ) -> None:
        """Push the current branch, or *branch* to *remote* when given."""
        cmd_parts = ['push']
        if force:
            cmd_parts.append('--force')
        if set_upstream:
            cmd_parts.append('--set-upstream')
        if remote:
            cmd_parts.append(remote)
        if branch:
            cmd_parts.append(branch)
        log.info('push', remote=remote or 'upstream', branch=branch or 'current', force=force)
        await self.run(*cmd_parts)

    async def fetch(self, remote: str, ref: str) -> None:
        """Fetch a single ref from *remote*."""
        await self.run('fetch', remote, ref)

    async def checkout(self, branch: str) -> None:
        """Switch to *branch*, creating a tracking branch if only the remote has it."""
        log.info('checkout', branch=branch)
        await self.run('checkout', branch)

    async def pull(self) -> None:
        """Pull the upstream of the current branch."""
        await self.run('pull')

    async def latest_tag(self) -> str:
        """Return the most recent tag reachable from HEAD."""
        result = await self.run('describe', '--tags', '--abbrev=0', suppress_output=True)
        return result.stdout.strip()

    async def latest_subject(self) -> str:
        """Return the subject line of the HEAD commit."""
        result = await self.run('show', '--no-patch', '--format=%s', suppress_output=True)
        return result.stdout.strip()

    async def remote_refs(self, remote: str = 'origin') -> list[str]:
        """Return every tag and branch ref on *remote*.

        Peeled tag entries (``refs/tags/v1^{}``) are dropped; they are not
        refs that can be deleted.
        """
        result = await self.run('ls-remote', '--tags', '--heads', remote, suppress_output=True)
        refs: list[str] = []
        for line in result.stdout.splitlines():
            parts = line.split('\t')
            if len(parts) != 2 or parts[1].endswith('^{}'):
                continue
            refs.append(parts[1])
        return refs

    async def delete_remote_refs(self, refs: list[str], remote: str = 'origin') -> None:
        """Delete *refs* on *remote* in a single push."""
        if not refs:
            return
        log.info('delete_remote_refs', count=len(refs))
        await self.run('push', remote, '--delete', *refs)


__all__ = [
    'GitCLIBackend',
]
