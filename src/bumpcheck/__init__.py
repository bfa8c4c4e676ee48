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

"""bumpcheck: end-to-end harness for a version-bump CI action.

Builds a disposable repository, pushes scripted commits to it, waits for
the hosted CI run each push triggers and checks the version, tag and
commit message the action left behind.

Subcommands::

    bumpcheck run [--suite NAME ...]   Provision, run every suite, summarize
    bumpcheck list                     Show suites and expectations
    bumpcheck explain CODE             Explain a BC-* error code
"""

__version__ = '0.1.0'

__all__: list[str] = ['__version__']
