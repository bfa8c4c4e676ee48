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

"""YAML suite fixture loader.

Fixture layout::

    actionFiles:                 # globs, relative to the source root
      - index.js
      - package.json
    suites:
      - name: default branch
        yaml:                    # workflow definition, written verbatim
          name: Bump version
          on: [push]
          jobs: {...}
        tests:
          - message: 'feat: add widget'
            expected:
              version: 1.1.0
              tag: v1.1.0        # optional, defaults to version
              branch: release    # optional, checked out as <scope>-release
              message: 'ci: bump to 1.1.0'   # optional

The fixture is parsed once into frozen dataclasses and never mutated.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from bumpcheck.errors import E, BumpCheckError
from bumpcheck.expectations import Expectation
from bumpcheck.logging import get_logger

logger = get_logger(__name__)

_BOOL_TAG = 'tag:yaml.org,2002:bool'


class FixtureLoader(yaml.SafeLoader):
    """Safe loader with YAML 1.2 booleans.

    PyYAML follows YAML 1.1, where the workflow key ``on`` (and ``yes``,
    ``no``, ``off``) load as booleans. Only ``true`` and ``false`` are
    booleans here, so ``on: [push]`` survives the round trip to
    ``push.yml``.
    """


FixtureLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
FixtureLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r'^(?:true|True|TRUE|false|False|FALSE)$'),
    list('tTfF'),
)


@dataclass(frozen=True)
class Scenario:
    """One commit pushed to the test repository and what must follow."""

    message: str
    expected: Expectation


@dataclass(frozen=True)
class Suite:
    """A workflow definition and the ordered scenarios run against it."""

    name: str
    workflow: Mapping[str, Any]
    scenarios: tuple[Scenario, ...] = ()


@dataclass(frozen=True)
class Fixture:
    """The whole fixture file."""

    action_files: tuple[str, ...] = ()
    suites: tuple[Suite, ...] = field(default_factory=tuple)

    def select(self, names: list[str]) -> Fixture:
        """Return a fixture holding only the suites named in *names*.

        Raises:
            BumpCheckError: If a name matches no suite.
        """
        if not names:
            return self
        known = {s.name for s in self.suites}
        unknown = [n for n in names if n not in known]
        if unknown:
            raise BumpCheckError(
                code=E.FIXTURE_INVALID,
                message=f'unknown suite(s): {", ".join(unknown)}',
                hint=f'Available: {", ".join(sorted(known))}',
            )
        return Fixture(
            action_files=self.action_files,
            suites=tuple(s for s in self.suites if s.name in names),
        )


def _invalid(where: str, message: str) -> BumpCheckError:
    return BumpCheckError(code=E.FIXTURE_INVALID, message=f'{where}: {message}')


def _optional_str(raw: Mapping[str, Any], key: str, where: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise _invalid(where, f'{key!r} must be a scalar')
    # `1.0` loads as a float, `true` as a bool.
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def parse_expectation(raw: object, where: str) -> Expectation:
    """Parse an ``expected`` mapping."""
    if raw is None:
        return Expectation()
    if not isinstance(raw, Mapping):
        raise _invalid(where, "'expected' must be a mapping")
    unknown = set(raw) - {'version', 'tag', 'branch', 'message'}
    if unknown:
        raise _invalid(where, f'unknown expectation key(s): {", ".join(sorted(map(str, unknown)))}')
    return Expectation(
        version=_optional_str(raw, 'version', where),
        tag=_optional_str(raw, 'tag', where),
        branch=_optional_str(raw, 'branch', where),
        message=_optional_str(raw, 'message', where),
    )


def parse_suite(raw: object, index: int) -> Suite:
    """Parse one entry of ``suites``."""
    where = f'suites[{index}]'
    if not isinstance(raw, Mapping):
        raise _invalid(where, 'must be a mapping')
    name = raw.get('name')
    if not isinstance(name, str) or not name:
        raise _invalid(where, "missing 'name'")
    workflow = raw.get('yaml')
    if not isinstance(workflow, Mapping):
        raise _invalid(f'{where} ({name})', "'yaml' must be a workflow mapping")
    tests = raw.get('tests') or []
    if not isinstance(tests, list):
        raise _invalid(f'{where} ({name})', "'tests' must be a list")

    scenarios: list[Scenario] = []
    for i, test in enumerate(tests):
        test_where = f'{where}.tests[{i}]'
        if not isinstance(test, Mapping):
            raise _invalid(test_where, 'must be a mapping')
        message = test.get('message')
        if not isinstance(message, str) or not message.strip():
            raise _invalid(test_where, "missing commit 'message'")
        scenarios.append(Scenario(message=message, expected=parse_expectation(test.get('expected'), test_where)))

    return Suite(name=name, workflow=dict(workflow), scenarios=tuple(scenarios))


def parse_fixture(data: object) -> Fixture:
    """Validate parsed YAML and build a :class:`Fixture`."""
    if not isinstance(data, Mapping):
        raise _invalid('fixture', 'top level must be a mapping')
    action_files = data.get('actionFiles') or []
    if not isinstance(action_files, list) or not all(isinstance(p, str) for p in action_files):
        raise _invalid('actionFiles', 'must be a list of glob strings')
    suites_raw = data.get('suites') or []
    if not isinstance(suites_raw, list):
        raise _invalid('suites', 'must be a list')
    suites = tuple(parse_suite(s, i) for i, s in enumerate(suites_raw))

    names = [s.name for s in suites]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise _invalid('suites', f'duplicate suite name(s): {", ".join(duplicates)}')
    return Fixture(action_files=tuple(action_files), suites=suites)


def load_fixture(path: Path) -> Fixture:
    """Read and validate the YAML fixture at *path*.

    Raises:
        BumpCheckError: ``BC-FIXTURE-NOT-FOUND`` or ``BC-FIXTURE-INVALID``.
    """
    if not path.is_file():
        raise BumpCheckError(
            code=E.FIXTURE_NOT_FOUND,
            message=f'fixture not found: {path}',
            hint='Pass --fixture <path> or set BUMPCHECK_FIXTURE.',
        )
    try:
        data = yaml.load(path.read_text(encoding='utf-8'), Loader=FixtureLoader)  # noqa: S506 - SafeLoader subclass
    except yaml.YAMLError as exc:
        raise _invalid(str(path), f'not valid YAML: {exc}') from exc

    fixture = parse_fixture(data)
    logger.info(
        'fixture_loaded',
        path=str(path),
        suites=len(fixture.suites),
        scenarios=sum(len(s.scenarios) for s in fixture.suites),
    )
    return fixture


__all__ = [
    'Fixture',
    'Scenario',
    'Suite',
    'load_fixture',
    'parse_fixture',
]
