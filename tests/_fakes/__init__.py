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

"""Shared test fakes for bumpcheck.

Reusable in-memory implementations of the ``Git``, ``RunStatus`` and
``Manifest`` protocols. They record every call and simulate just enough
repository and CI state for the executor and provisioner to run.

Usage::

    from tests._fakes import FakeActions, FakeGit, FakeManifest, make_run

    git = FakeGit(tmp_path, branch='main')
    actions = FakeActions(most_recent=[None, make_run(1)])
"""

from tests._fakes._actions import FakeActions as FakeActions, make_run as make_run
from tests._fakes._git import OK as OK, FakeGit as FakeGit
from tests._fakes._manifest import FakeManifest as FakeManifest

__all__ = [
    'OK',
    'FakeActions',
    'FakeGit',
    'FakeManifest',
    'make_run',
]
