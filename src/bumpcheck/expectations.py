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

"""Expectation default-filling and comparison.

Pure functions, no I/O. The executor reads the repository state, then
asks :func:`evaluate` whether it matches the fixture.

Default rules (applied once, before any comparison)::

    tag      unset → expected version
    message  unset → the observed message (never a mismatch)
    version  unset → version and defaulted tag are not compared
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Expectation:
    """What the repository should look like after the run.

    Attributes:
        version: Manifest version.
        tag: Most recent tag; defaults to ``version``.
        branch: Branch suffix the action pushed to, checked out as
            ``{scope}-{branch}``.
        message: Subject of the most recent commit.
    """

    version: str | None = None
    tag: str | None = None
    branch: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class ObservedState:
    """Repository state read back after a run."""

    version: str
    tag: str
    message: str


@dataclass(frozen=True)
class ResolvedExpectation:
    """An :class:`Expectation` with every default filled in.

    ``None`` means the field is not compared.
    """

    version: str | None
    tag: str | None
    message: str


@dataclass(frozen=True)
class Mismatch:
    """One field whose observed value differs from the expectation."""

    field: str
    expected: str
    actual: str


@dataclass(frozen=True)
class Verdict:
    """Outcome of comparing observed state to an expectation."""

    resolved: ResolvedExpectation
    mismatches: tuple[Mismatch, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        """Whether every compared field matched."""
        return not self.mismatches


def branch_ref(scope: str, branch: str) -> str:
    """Return the scoped branch name ``{scope}-{branch}``."""
    return f'{scope}-{branch}'


def resolve(expected: Expectation, observed: ObservedState) -> ResolvedExpectation:
    """Fill in defaults for *expected*.

    Idempotent: resolving an already complete expectation changes nothing.
    """
    tag = expected.tag if expected.tag is not None else expected.version
    message = expected.message if expected.message is not None else observed.message
    return ResolvedExpectation(version=expected.version, tag=tag, message=message)


def evaluate(observed: ObservedState, expected: Expectation) -> Verdict:
    """Compare *observed* against *expected* after default-filling."""
    resolved = resolve(expected, observed)
    pairs = (
        ('version', resolved.version, observed.version),
        ('tag', resolved.tag, observed.tag),
        ('message', resolved.message, observed.message),
    )
    mismatches = tuple(
        Mismatch(field=name, expected=want, actual=got) for name, want, got in pairs if want is not None and want != got
    )
    return Verdict(resolved=resolved, mismatches=mismatches)


__all__ = [
    'Expectation',
    'Mismatch',
    'ObservedState',
    'ResolvedExpectation',
    'Verdict',
    'branch_ref',
    'evaluate',
    'resolve',
]
