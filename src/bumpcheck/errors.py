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

"""Structured error system for bumpcheck.

Every error has a unique ``BC-NAMED-KEY`` code, a human-readable message,
and an optional hint with a suggested fix.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorCode           │ A unique named ID like "BC-RUN-CONCLUSION"    │
    │                     │ for each failure. Readable at a glance.       │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ BumpCheckError      │ An exception you can raise. Carries the       │
    │                     │ error card so renderers can display it.       │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Subclasses          │ One per failure kind (provisioning, command,  │
    │                     │ transport, conclusion, mismatch) so callers   │
    │                     │ can catch exactly what they handle.           │
    └─────────────────────┴────────────────────────────────────────────────┘

Failure kinds and their blast radius::

    ProvisioningError   setup failed             → whole run aborted
    CommandError        git / npm exited != 0    → scenario failed
    CommandAbortedError git / npm hung or missing → scenario failed
    ManifestError       package.json unreadable  → scenario failed
    TransportError      run-status API failed    → scenario failed
    RunTimeoutError     poll guard exceeded      → scenario failed
    ConclusionFailure   CI run did not succeed   → scenario failed, no asserts
    AssertionMismatch   observed != expected     → scenario failed

Usage::

    from bumpcheck.errors import BumpCheckError, E

    raise BumpCheckError(
        code=E.CONFIG_MISSING_REQUIRED,
        message='TEST_REPO is not set.',
        hint='Export TEST_REPO=https://github.com/<owner>/<repo>.',
    )
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TextIO

from rich.console import Console
from rich.markup import escape as rich_escape

from bumpcheck.log_redact import redact_credentials

if TYPE_CHECKING:
    from bumpcheck.backends._run import CommandResult
    from bumpcheck.expectations import Mismatch


class ErrorCode(str, Enum):
    """Enumeration of all bumpcheck diagnostic codes."""

    # Configuration
    CONFIG_MISSING_REQUIRED = 'BC-CONFIG-MISSING-REQUIRED'
    CONFIG_INVALID_VALUE = 'BC-CONFIG-INVALID-VALUE'

    # Fixture
    FIXTURE_NOT_FOUND = 'BC-FIXTURE-NOT-FOUND'
    FIXTURE_INVALID = 'BC-FIXTURE-INVALID'

    # Setup
    PROVISION_FAILED = 'BC-PROVISION-FAILED'

    # Scenario execution
    COMMAND_FAILED = 'BC-COMMAND-FAILED'
    COMMAND_ABORTED = 'BC-COMMAND-ABORTED'
    MANIFEST_UNREADABLE = 'BC-MANIFEST-UNREADABLE'
    TRANSPORT_FAILED = 'BC-TRANSPORT-FAILED'
    RUN_TIMEOUT = 'BC-RUN-TIMEOUT'
    RUN_CONCLUSION = 'BC-RUN-CONCLUSION'
    ASSERTION_MISMATCH = 'BC-ASSERTION-MISMATCH'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``BC-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class BumpCheckError(Exception):
    """Base exception for all bumpcheck errors.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint


class ProvisioningError(BumpCheckError):
    """A setup step failed while building the disposable repository."""

    def __init__(self, step: str, message: str, hint: str = '') -> None:
        """Initialize with the name of the failing setup step."""
        self.step = step
        super().__init__(E.PROVISION_FAILED, f'{step}: {message}', hint)


class CommandError(BumpCheckError):
    """An external command (``git``, ``npm``) exited with a nonzero code."""

    def __init__(self, result: CommandResult) -> None:
        """Initialize from the failed :class:`CommandResult`."""
        self.result = result
        detail = result.stderr.strip() or result.stdout.strip()
        message = f'`{result.command_str}` exited with code {result.return_code}'
        if detail:
            message = f'{message}: {detail.splitlines()[-1]}'
        super().__init__(E.COMMAND_FAILED, redact_credentials(message))


class CommandAbortedError(BumpCheckError):
    """An external command could not be started or ran past its timeout."""

    def __init__(self, command: str, reason: str) -> None:
        """Initialize with the (already redacted) command line and why it stopped."""
        self.command = command
        super().__init__(
            E.COMMAND_ABORTED,
            redact_credentials(f'`{command}` {reason}'),
            hint='Check network access to the test repository, or that git and npm are on PATH.',
        )


class ManifestError(BumpCheckError):
    """``package.json`` is missing or is not a JSON object."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize with the manifest path and the read or parse failure."""
        self.path = path
        super().__init__(E.MANIFEST_UNREADABLE, f'{path}: {reason}')


class TransportError(BumpCheckError):
    """A run-status API request failed or returned an error status."""

    def __init__(self, message: str, *, status: int | None = None, hint: str = '') -> None:
        """Initialize with an optional HTTP status code."""
        self.status = status
        super().__init__(E.TRANSPORT_FAILED, message, hint)


class RunTimeoutError(BumpCheckError):
    """A polling phase exceeded its configured guard."""

    def __init__(self, phase: str, attempts: int, elapsed: float) -> None:
        """Initialize with the polling phase name and how long it ran."""
        self.phase = phase
        self.attempts = attempts
        super().__init__(
            E.RUN_TIMEOUT,
            f'{phase}: condition not met after {attempts} attempts ({elapsed:.1f}s)',
            hint='Raise BUMPCHECK_POLL_TIMEOUT or set it to 0 to poll until the CI job times out.',
        )


class ConclusionFailure(BumpCheckError):
    """The CI run completed but did not conclude with ``success``."""

    def __init__(self, run_id: int, conclusion: str | None, url: str = '') -> None:
        """Initialize with the run identifier and its conclusion."""
        self.run_id = run_id
        self.conclusion = conclusion
        super().__init__(
            E.RUN_CONCLUSION,
            f'run {run_id} concluded with {conclusion!r}, expected \'success\'',
            hint=f'Inspect the run logs: {url}' if url else '',
        )


class AssertionMismatch(BumpCheckError):
    """Observed repository state diverges from the expectation."""

    def __init__(self, mismatches: Sequence[Mismatch]) -> None:
        """Initialize with every mismatching field."""
        self.mismatches = list(mismatches)
        detail = '; '.join(f'{m.field}: expected {m.expected!r}, got {m.actual!r}' for m in self.mismatches)
        super().__init__(E.ASSERTION_MISMATCH, detail)


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.CONFIG_MISSING_REQUIRED: ErrorInfo(
        code=E.CONFIG_MISSING_REQUIRED,
        message='A required environment variable is not set.',
        hint='Set TEST_REPO, TEST_USER and TEST_TOKEN (a .env file in the working directory is read too).',
    ),
    E.CONFIG_INVALID_VALUE: ErrorInfo(
        code=E.CONFIG_INVALID_VALUE,
        message='A configuration value is malformed or out of range.',
        hint='Check TEST_REPO, the scope, the poll seconds and that --workdir does not contain --source-root.',
    ),
    E.FIXTURE_NOT_FOUND: ErrorInfo(
        code=E.FIXTURE_NOT_FOUND,
        message='The suite fixture file does not exist.',
        hint='Pass --fixture <path> or set BUMPCHECK_FIXTURE.',
    ),
    E.FIXTURE_INVALID: ErrorInfo(
        code=E.FIXTURE_INVALID,
        message='The suite fixture does not match the expected structure.',
        hint="Each suite needs 'name', 'yaml' and a 'tests' list of {message, expected}.",
    ),
    E.PROVISION_FAILED: ErrorInfo(
        code=E.PROVISION_FAILED,
        message='Building the disposable test repository failed; no suite was run.',
        hint='Check that TEST_TOKEN can push to TEST_REPO and delete its workflow runs.',
    ),
    E.COMMAND_FAILED: ErrorInfo(
        code=E.COMMAND_FAILED,
        message='A git or npm command exited with a nonzero status.',
        hint='Run with --verbose to see the full command output.',
    ),
    E.COMMAND_ABORTED: ErrorInfo(
        code=E.COMMAND_ABORTED,
        message='A git or npm command could not be started or did not finish in time.',
        hint='Check network access to the test repository, or that git and npm are on PATH.',
    ),
    E.MANIFEST_UNREADABLE: ErrorInfo(
        code=E.MANIFEST_UNREADABLE,
        message='package.json on the checked-out branch is missing or not valid JSON.',
        hint='Inspect the commit the action pushed; it may have rewritten package.json.',
    ),
    E.TRANSPORT_FAILED: ErrorInfo(
        code=E.TRANSPORT_FAILED,
        message='A GitHub Actions API request failed or returned an unusable response.',
        hint='Check TEST_TOKEN scopes and BUMPCHECK_API_URL; requests are not retried.',
    ),
    E.RUN_TIMEOUT: ErrorInfo(
        code=E.RUN_TIMEOUT,
        message='No matching workflow run started or completed within the poll guard.',
        hint='Raise BUMPCHECK_POLL_TIMEOUT or set it to 0 to poll until the CI job times out.',
    ),
    E.RUN_CONCLUSION: ErrorInfo(
        code=E.RUN_CONCLUSION,
        message='The workflow run triggered by the push did not succeed.',
        hint='Open the run URL in the error to see why the action failed.',
    ),
    E.ASSERTION_MISMATCH: ErrorInfo(
        code=E.ASSERTION_MISMATCH,
        message='The version, tag or commit message after the run differs from the fixture.',
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"BC-RUN-CONCLUSION"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def render_error(exc: BumpCheckError, *, file: TextIO | None = None) -> None:
    """Render an error in Rust-compiler style.

    Output format::

        error[BC-RUN-CONCLUSION]: run 42 concluded with 'failure'
          |
          = hint: Inspect the run logs: https://github.com/...
    """
    out = file or sys.stderr
    console = Console(file=out, highlight=False)
    msg = rich_escape(exc.info.message)
    console.print(
        f'[bold red]error[/bold red][bold red]\\[{exc.code.value}][/bold red][bold]: {msg}[/bold]',
    )
    if exc.hint:
        console.print('  [dim]|[/dim]')
        console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {rich_escape(exc.hint)}')
    console.print()


__all__ = [
    'E',
    'ERRORS',
    'AssertionMismatch',
    'BumpCheckError',
    'CommandError',
    'CommandAbortedError',
    'ConclusionFailure',
    'ErrorCode',
    'ErrorInfo',
    'ManifestError',
    'ProvisioningError',
    'RunTimeoutError',
    'TransportError',
    'explain',
    'render_error',
]
