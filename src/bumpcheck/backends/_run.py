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

"""Blocking subprocess runner shared by the git and npm backends.

Every external command the harness issues goes through :func:`run_command`
with an explicit ``cwd``; nothing here changes the process working
directory. Callers on the event loop wrap it in ``asyncio.to_thread()``.

Output is captured and echoed to the log as one ``command_output`` event,
at ``info`` by default or ``debug`` when the caller passes ``quiet=True``.
The echoed command line has URL credentials masked.
"""

from __future__ import annotations

import os
import shlex
import subprocess  # noqa: S404 - running git and npm is the point of this module
import time
from dataclasses import dataclass
from pathlib import Path

from bumpcheck.errors import CommandAbortedError, CommandError
from bumpcheck.log_redact import redact_credentials
from bumpcheck.logging import get_logger

log = get_logger('bumpcheck.backends.run')

# git push over a slow link and npm init on a cold cache stay well under this.
DEFAULT_TIMEOUT_SECONDS = 300

# Echoed output is cut to this many characters per stream.
_ECHO_LIMIT = 2000


@dataclass(frozen=True)
class CommandResult:
    """What a finished command returned.

    Attributes:
        command: Program and arguments as passed to :func:`run_command`.
        return_code: Exit status.
        stdout: Captured standard output (empty when not captured).
        stderr: Captured standard error (empty when not captured).
        duration: Wall-clock seconds.
    """

    command: list[str]
    return_code: int
    stdout: str = ''
    stderr: str = ''
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """True for a zero exit status."""
        return self.return_code == 0

    @property
    def command_str(self) -> str:
        """Shell-quoted command line with credentials masked."""
        return redact_credentials(shlex.join(self.command))

    @property
    def output(self) -> str:
        """Stdout followed by stderr, stripped."""
        return '\n'.join(s for s in (self.stdout.strip(), self.stderr.strip()) if s)


def run_command(
    cmd: list[str],
    *,
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    capture: bool = True,
    check: bool = False,
    quiet: bool = False,
) -> CommandResult:
    """Run *cmd* to completion and return its :class:`CommandResult`.

    Args:
        cmd: Program and arguments.
        cwd: Directory to run in.
        env: Variables layered over the current environment.
        timeout: Seconds before the child is killed.
        capture: Capture stdout and stderr as text.
        check: Raise :class:`~bumpcheck.errors.CommandError` on a nonzero
            exit.
        quiet: Echo captured output at ``debug`` instead of ``info``.

    Raises:
        CommandError: ``check`` is set and the command failed.
        CommandAbortedError: The program could not be started or ran
            past ``timeout``.
    """
    display = redact_credentials(shlex.join(cmd))
    log.debug('run_command', cmd=display, cwd=str(cwd or '.'))

    started = time.monotonic()
    try:
        proc = subprocess.run(  # noqa: S603 - argv comes from the backends, never a shell
            cmd,
            cwd=cwd,
            env={**os.environ, **env} if env else None,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        log.error('command_timeout', cmd=display, timeout=timeout)
        raise CommandAbortedError(display, f'timed out after {timeout}s') from exc
    except OSError as exc:
        log.error('command_not_started', cmd=display, error=str(exc))
        raise CommandAbortedError(display, f'could not be started: {exc}') from exc

    result = CommandResult(
        command=cmd,
        return_code=proc.returncode,
        stdout=proc.stdout or '',
        stderr=proc.stderr or '',
        duration=time.monotonic() - started,
    )

    if result.output:
        emit = log.debug if quiet else log.info
        emit('command_output', cmd=display, output=result.output[:_ECHO_LIMIT])

    if not result.ok:
        log.warning('command_failed', cmd=display, return_code=result.return_code, duration=round(result.duration, 3))
        if check:
            raise CommandError(result)
    return result


__all__ = [
    'DEFAULT_TIMEOUT_SECONDS',
    'CommandResult',
    'run_command',
]
