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

"""Tests for bumpcheck.expectations."""

from __future__ import annotations

import pytest
from bumpcheck.expectations import (
    Expectation,
    Mismatch,
    ObservedState,
    branch_ref,
    evaluate,
    resolve,
)

OBSERVED = ObservedState(version='1.1.0', tag='1.1.0', message='ci: version bump to 1.1.0')


class TestBranchRef:
    """Tests for branch_ref."""

    def test_prefixes_scope(self) -> None:
        """The branch suffix is combined with the scope."""
        assert branch_ref('pr-42', 'release') == 'pr-42-release'


class TestResolve:
    """Tests for default-filling."""

    @pytest.mark.parametrize('version', ['1.0.0', '2.0.0-rc.1', '10.4.7'])
    def test_tag_defaults_to_version(self, version: str) -> None:
        """An unset tag takes the expected version."""
        assert resolve(Expectation(version=version), OBSERVED).tag == version

    def test_explicit_tag_kept(self) -> None:
        """An explicit tag is not overwritten."""
        assert resolve(Expectation(version='1.1.0', tag='v1.1.0'), OBSERVED).tag == 'v1.1.0'

    def test_message_defaults_to_observed(self) -> None:
        """An unset message takes the observed subject."""
        assert resolve(Expectation(version='1.1.0'), OBSERVED).message == OBSERVED.message

    def test_idempotent(self) -> None:
        """Resolving an already resolved expectation changes nothing."""
        first = resolve(Expectation(version='1.1.0'), OBSERVED)
        again = resolve(Expectation(version=first.version, tag=first.tag, message=first.message), OBSERVED)
        assert again == first

    def test_no_version_means_no_tag(self) -> None:
        """Without a version the defaulted tag is not compared either."""
        resolved = resolve(Expectation(), OBSERVED)
        assert resolved.version is None
        assert resolved.tag is None


class TestEvaluate:
    """Tests for evaluate."""

    def test_match(self) -> None:
        """Matching state yields an ok verdict."""
        verdict = evaluate(OBSERVED, Expectation(version='1.1.0'))
        assert verdict.ok
        assert verdict.mismatches == ()

    @pytest.mark.parametrize(
        'observed_message',
        ['feat: add widget', '', 'ci: version bump to 9.9.9'],
    )
    def test_unset_message_never_mismatches(self, observed_message: str) -> None:
        """Any observed subject satisfies an unset message."""
        observed = ObservedState(version='1.1.0', tag='1.1.0', message=observed_message)
        verdict = evaluate(observed, Expectation(version='1.1.0'))
        assert all(m.field != 'message' for m in verdict.mismatches)

    def test_reports_every_field(self) -> None:
        """All mismatching fields are returned, in field order."""
        observed = ObservedState(version='1.0.1', tag='v1.0.1', message='feat: x')
        verdict = evaluate(observed, Expectation(version='1.1.0', message='ci: bump'))
        assert not verdict.ok
        assert verdict.mismatches == (
            Mismatch('version', '1.1.0', '1.0.1'),
            Mismatch('tag', '1.1.0', 'v1.0.1'),
            Mismatch('message', 'ci: bump', 'feat: x'),
        )

    def test_tag_mismatch_only(self) -> None:
        """A wrong tag is caught even when the version matches."""
        observed = ObservedState(version='1.1.0', tag='v1.1.0', message='x')
        verdict = evaluate(observed, Expectation(version='1.1.0'))
        assert [m.field for m in verdict.mismatches] == ['tag']

    def test_empty_expectation_always_ok(self) -> None:
        """An expectation with nothing set asserts nothing."""
        assert evaluate(ObservedState('', '', ''), Expectation()).ok
