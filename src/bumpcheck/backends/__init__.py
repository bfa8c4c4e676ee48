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

"""Backend protocols for bumpcheck.

The executor and provisioner only talk to these protocols, so tests can
swap in the fakes from ``tests._fakes``. Implementations:

- :class:`Git`: :class:`~bumpcheck.backends.git.GitCLIBackend`
- :class:`RunStatus`: :class:`~bumpcheck.backends.actions.GitHubActionsClient`
- :class:`Manifest`: :class:`~bumpcheck.backends.manifest.NpmManifest`
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from bumpcheck.backends._run import CommandResult
from bumpcheck.backends.actions import GitHubActionsClient as GitHubActionsClient, Run
from bumpcheck.backends.git import GitCLIBackend as GitCLIBackend
from bumpcheck.backends.manifest import NpmManifest as NpmManifest

__all__ = [
    'Git',
    'GitCLIBackend',
    'GitHubActionsClient',
    'Manifest',
    'NpmManifest',
    'RunStatus',
]


@runtime_checkable
class Git(Protocol):
    """Version-control operations the harness issues.

    Every method raises :class:`~bumpcheck.errors.CommandError` when the
    underlying command exits nonzero.
    """

    @property
    def root(self) -> Path:
        """The repository working directory."""
        ...

    async def run(self, *args: str, suppress_output: bool = False) -> CommandResult:
        """Run an arbitrary git command and return its captured output."""
        ...

    async def init(self, branch: str) -> None:
        """Create the repository with *branch* as the initial branch."""
        ...

    async def add_remote(self, name: str, url: str) -> None:
        """Register a remote."""
        ...

    async def set_identity(self, name: str, email: str) -> None:
        """Configure the committer identity."""
        ...

    async def add(self, *paths: str, force: bool = False) -> None:
        """Stage *paths*."""
        ...

    async def commit(self, message: str) -> None:
        """Commit the staged changes."""
        ...

    async def push(
        self,
        *,
        remote: str = '',
        branch: str = '',
        force: bool = False,
        set_upstream: bool = False,
    ) -> None:
        """Push commits."""
        ...

    async def fetch(self, remote: str, ref: str) -> None:
        """Fetch a single ref."""
        ...

    async def checkout(self, branch: str) -> None:
        """Switch branches."""
        ...

    async def pull(self) -> None:
        """Pull the upstream of the current branch."""
        ...

    async def latest_tag(self) -> str:
        """Return the most recent tag reachable from HEAD."""
        ...

    async def latest_subject(self) -> str:
        """Return the subject line of HEAD."""
        ...

    async def remote_refs(self, remote: str = 'origin') -> list[str]:
        """Return every tag and branch ref on *remote*."""
        ...

    async def delete_remote_refs(self, refs: list[str], remote: str = 'origin') -> None:
        """Delete *refs* on *remote*."""
        ...


@runtime_checkable
class RunStatus(Protocol):
    """Read and purge CI run history.

    ``most_recent_run`` returns ``None`` when no run exists. Failures
    raise :class:`~bumpcheck.errors.TransportError` and are not retried.
    """

    async def most_recent_run(self, branch: str | None = None) -> Run | None:
        """Return the newest run, or ``None``."""
        ...

    async def get_run(self, run_id: int) -> Run:
        """Return the current state of a run."""
        ...

    async def clear_runs(self, branch: str | None = None) -> int:
        """Delete run history; return how many runs were deleted."""
        ...


@runtime_checkable
class Manifest(Protocol):
    """The package manifest whose version the action bumps."""

    async def init(self) -> None:
        """Create a default manifest."""
        ...

    async def version(self) -> str:
        """Return the manifest's version field."""
        ...
