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

"""Files the executor writes into the scratch repository.

Each scenario commit carries a fresh ``README.md`` describing the suite's
workflow, the commit message and the expectation, so no commit is ever
empty and the test repository documents what each push was checking.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import Any

import yaml

from bumpcheck.expectations import Expectation

WORKFLOW_PATH = PurePosixPath('.github/workflows/push.yml')
README_PATH = PurePosixPath('README.md')


def dump_workflow(workflow: Mapping[str, Any]) -> str:
    """Serialize a suite's workflow definition, keeping key order."""
    return yaml.safe_dump(dict(workflow), sort_keys=False, default_flow_style=False)


def expectation_text(expected: Expectation) -> str:
    """Render *expected* as a markdown list; unset optional fields are omitted."""
    lines = [f'- **Version:** {expected.version}']
    if expected.tag:
        lines.append(f'- **Tag:** {expected.tag}')
    if expected.branch:
        lines.append(f'- **Branch:** {expected.branch}')
    if expected.message:
        lines.append(f'- **Message:** {expected.message}')
    return '\n'.join(lines)


def render_report(workflow_text: str, message: str, expected: Expectation) -> str:
    """Return the ``README.md`` content for one scenario commit."""
    return '\n'.join([
        '# Test Details',
        f'## {WORKFLOW_PATH}',
        '```YAML',
        workflow_text,
        '```',
        '## Message',
        message,
        '## Expectation',
        expectation_text(expected),
    ])


__all__ = [
    'README_PATH',
    'WORKFLOW_PATH',
    'dump_workflow',
    'expectation_text',
    'render_report',
]
