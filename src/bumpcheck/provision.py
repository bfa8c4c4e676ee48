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

"""Build and push the disposable test repository.

Provisioning runs once, before any suite::

    ┌──────────────────────────────────────────────────────────────┐
    │ 1. wipe + recreate workdir                                  │
    │ 2. gather( clear runs │ npm init -y │ copy action files )   │
    │ 3. git init --initial-branch <scope>                        │
    │ 4. git remote add origin https://<user>:<token>@host/...    │
    │ 5. git config user.name / user.email                        │
    │ 6. git add . && git commit 'initial commit (version 1.0.0)' │
    │ 7. git push --force --set-upstream origin <scope>           │
    │ 8. delete every remote tag/branch except refs/heads/<scope> │
    └──────────────────────────────────────────────────────────────┘

Any failure is raised as :class:`~bumpcheck.errors.ProvisioningError`
naming the step, chained to the cause. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import glob
import shutil
from collections.abc import Awaitable, Sequence
from pathlib import Path
from typing import TypeVar

from bumpcheck.backends import Git, GitCLIBackend, Manifest, NpmManifest, RunStatus
from bumpcheck.config import HarnessConfig, check_workdir
from bumpcheck.errors import BumpCheckError, ProvisioningError
from bumpcheck.logging import get_logger

log = get_logger('bumpcheck.provision')

T = TypeVar('T')

ACTION_DIR = 'action'
INITIAL_COMMIT_MESSAGE = 'initial commit (version 1.0.0)'


def stage_action_files(patterns: Sequence[str], source_root: Path, dest: Path) -> list[str]:
    """Copy files matching *patterns* under *source_root* into *dest*.

    Relative paths are preserved, directory matches are skipped and
    overlapping globs copy each file once.

    Returns:
        The copied paths, relative to *source_root*, sorted.
    """
    matches: set[str] = set()
    for pattern in patterns:
        matches.update(glob.glob(pattern, root_dir=source_root, recursive=True))

    copied: list[str] = []
    for rel in sorted(matches):
        src = source_root / rel
        if not src.is_file():
            continue
        target = dest / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, target)
        copied.append(rel)
    log.info('action_files_staged', count=len(copied), dest=str(dest))
    return copied


class RepositoryProvisioner:
    """Creates the scratch repository and publishes it as ``<scope>``.

    Args:
        config: Harness configuration.
        actions: Run-status client used to purge run history.
        git: Git backend; defaults to one rooted at ``config.workdir``.
        manifest: Manifest backend; defaults to ``package.json`` in
            ``config.workdir``.
    """

    def __init__(
        self,
        config: HarnessConfig,
        actions: RunStatus,
        *,
        git: Git | None = None,
        manifest: Manifest | None = None,
    ) -> None:
        """Initialize with configuration and backends."""
        self._config = config
        self._actions = actions
        self._git = git or GitCLIBackend(config.workdir)
        self._manifest = manifest or NpmManifest(config.workdir)

    @property
    def git(self) -> Git:
        """The git backend the repository was built with."""
        return self._git

    @property
    def manifest(self) -> Manifest:
        """The manifest backend of the scratch repository."""
        return self._manifest

    async def _step(self, name: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except ProvisioningError:
            raise
        except BumpCheckError as exc:
            raise ProvisioningError(name, exc.info.message, hint=exc.hint) from exc
        except OSError as exc:
            raise ProvisioningError(name, str(exc)) from exc

    def _reset_workdir(self) -> None:
        workdir = self._config.workdir
        check_workdir(workdir, self._config.source_root)
        if workdir.exists():
            shutil.rmtree(workdir)
        workdir.mkdir(parents=True)

    async def _stage(self, patterns: Sequence[str]) -> list[str]:
        dest = self._config.workdir / ACTION_DIR
        await asyncio.to_thread(dest.mkdir)
        copied = await asyncio.to_thread(stage_action_files, patterns, self._config.source_root, dest)
        if patterns and not copied:
            raise ProvisioningError(
                'stage',
                f'no files under {self._config.source_root} match {", ".join(patterns)}',
                hint='Check actionFiles in the fixture and --source-root (BUMPCHECK_SOURCE_ROOT).',
            )
        return copied

    async def provision(self, action_files: Sequence[str]) -> Git:
        """Build, commit and push the scratch repository.

        Args:
            action_files: Glob patterns, relative to ``config.source_root``,
                of the action sources copied into ``action/``.

        Returns:
            The git backend for the pushed repository, on ``<scope>``.

        Raises:
            ProvisioningError: If any step fails.
        """
        cfg = self._config
        scope = cfg.scope
        log.info('provision_start', scope=scope, workdir=str(cfg.workdir))

        await self._step('reset_workdir', asyncio.to_thread(self._reset_workdir))
        await self._step(
            'prepare',
            asyncio.gather(
                self._actions.clear_runs(scope),
                self._manifest.init(),
                self._stage(action_files),
            ),
        )

        git = self._git
        await self._step('init', git.init(scope))
        await self._step('add_remote', git.add_remote('origin', cfg.authenticated_url()))
        await self._step('identity', git.set_identity(cfg.committer_name, cfg.committer_email))
        await self._step('initial_commit', self._initial_commit())
        await self._step('push', git.push(remote='origin', branch=scope, force=True, set_upstream=True))
        await self._step('delete_refs', self._delete_stale_refs())

        log.info('provision_done', scope=scope)
        return git

    async def _initial_commit(self) -> None:
        await self._git.add('.')
        await self._git.commit(INITIAL_COMMIT_MESSAGE)

    async def _delete_stale_refs(self) -> None:
        keep = f'refs/heads/{self._config.scope}'
        refs = [ref for ref in await self._git.remote_refs('origin') if ref != keep]
        await self._git.delete_remote_refs(refs, 'origin')
        log.info('stale_refs_deleted', count=len(refs))


__all__ = [
    'ACTION_DIR',
    'INITIAL_COMMIT_MESSAGE',
    'RepositoryProvisioner',
    'stage_action_files',
]
