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

"""Tests for bumpcheck.report."""

from __future__ import annotations

import yaml
from bumpcheck.expectations import Expectation
from bumpcheck.report import dump_workflow, expectation_text, render_report


class TestExpectationText:
    """Tests for expectation_text."""

    def test_version_only(self) -> None:
        """Only the version line is emitted when nothing else is set."""
        assert expectation_text(Expectation(version='1.1.0')) == '- **Version:** 1.1.0'

    def test_all_fields_in_order(self) -> None:
        """Optional fields follow the version, in a fixed order."""
        text = expectation_text(Expectation(version='2.0.0', tag='v2.0.0', branch='release', message='ci: bump'))
        assert text.splitlines() == [
            '- **Version:** 2.0.0',
            '- **Tag:** v2.0.0',
            '- **Branch:** release',
            '- **Message:** ci: bump',
        ]

    def test_unset_version_rendered_as_none(self) -> None:
        """A missing version still produces the version line."""
        assert expectation_text(Expectation(tag='v1')) == '- **Version:** None\n- **Tag:** v1'


class TestRenderReport:
    """Tests for render_report."""

    def test_layout(self) -> None:
        """The README embeds the workflow once, then message and expectation."""
        workflow_text = dump_workflow({'name': 'Bump', 'on': ['push']})
        report = render_report(workflow_text, 'feat: add widget', Expectation(version='1.1.0'))

        lines = report.splitlines()
        assert lines[0] == '# Test Details'
        assert lines[1] == '## .github/workflows/push.yml'
        assert lines[2] == '```YAML'
        assert report.count('name: Bump') == 1
        assert '## Message\nfeat: add widget\n## Expectation\n- **Version:** 1.1.0' in report
        assert report.endswith('- **Version:** 1.1.0')


class TestDumpWorkflow:
    """Tests for dump_workflow."""

    def test_keeps_key_order(self) -> None:
        """Keys are written in definition order, not sorted."""
        text = dump_workflow({'name': 'Bump', 'on': ['push'], 'jobs': {}})
        assert text.index('name') < text.index('on') < text.index('jobs')

    def test_on_key_survives_reload(self) -> None:
        """The 'on' trigger key reloads as a string under plain PyYAML."""
        text = dump_workflow({'on': ['push']})
        assert yaml.safe_load(text) == {'on': ['push']}
