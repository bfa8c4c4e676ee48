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

"""npm package manifest backend.

The action under test bumps the ``version`` field of ``package.json``, so
the scratch repository starts from ``npm init -y`` (version ``1.0.0``)
and the executor reads the field back after every run.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from bumpcheck.backends._run import run_command
from bumpcheck.errors import ManifestError
from bumpcheck.logging import get_logger

log = get_logger('bumpcheck.backends.manifest')

MANIFEST_FILENAME = 'package.json'


class NpmManifest:
    """:class:`~bumpcheck.backends.Manifest` implementation backed by ``npm``.

    Args:
        root: Directory holding ``package.json``.
    """

    def __init__(self, root: Path) -> None:
        """Initialize with the package root."""
        self._root = root

    @property
    def path(self) -> Path:
        """Absolute path of ``package.json``."""
        return self._root / MANIFEST_FILENAME

    async def init(self) -> None:
        """Create a default ``package.json`` with ``npm init -y``."""
        await asyncio.to_thread(run_command, ['npm', 'init', '-y'], cwd=self._root, check=True, quiet=True)
        log.info('manifest_initialized', path=str(self.path))

    async def version(self) -> str:
        """Return the ``version`` field, or an empty string when absent.

        Raises:
            ManifestError: If ``package.json`` cannot be read or is not a
                JSON object.
        """
        try:
            text = await asyncio.to_thread(self.path.read_text, encoding='utf-8')
            data = json.loads(text)
        except OSError as exc:
            raise ManifestError(str(self.path), exc.strerror or str(exc)) from exc
        except ValueError as exc:
            raise ManifestError(str(self.path), f'not valid JSON: {exc}') from exc
        if not isinstance(data, dict):
            raise ManifestError(str(self.path), f'expected a JSON object, got {type(data).__name__}')
        return str(data.get('version', ''))


__all__ = [
    'MANIFEST_FILENAME',
    'NpmManifest',
]
