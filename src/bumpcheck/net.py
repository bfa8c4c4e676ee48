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

"""HTTP utilities for bumpcheck.

Provides a managed :class:`httpx.AsyncClient` and a single-shot request
helper that turns every failure into a
:class:`~bumpcheck.errors.TransportError`.

Requests are never retried here; polling and retry live in
:mod:`bumpcheck.poll`.

Usage::

    from bumpcheck.net import http_client, send

    async with http_client(headers=headers) as client:
        response = await send(client, 'GET', url)
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Final

import httpx

from bumpcheck import __version__
from bumpcheck.errors import TransportError
from bumpcheck.logging import get_logger

log = get_logger('bumpcheck.net')

DEFAULT_POOL_SIZE: Final[int] = 4
DEFAULT_TIMEOUT: Final[float] = 30.0
USER_AGENT: Final[str] = f'bumpcheck/{__version__}'


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = '',
    headers: dict[str, str] | None = None,
) -> AsyncGenerator[httpx.AsyncClient]:
    """Create a managed async HTTP client with connection pooling.

    Args:
        pool_size: Maximum number of connections in the pool.
        timeout: Request timeout in seconds.
        base_url: Optional base URL for all requests.
        headers: Default headers, layered over the ``User-Agent``.

    Yields:
        An :class:`httpx.AsyncClient` instance.
    """
    limits = httpx.Limits(
        max_connections=pool_size,
        max_keepalive_connections=pool_size,
    )
    async with httpx.AsyncClient(
        limits=limits,
        timeout=httpx.Timeout(timeout),
        base_url=base_url,
        headers={'User-Agent': USER_AGENT, **(headers or {})},
        follow_redirects=True,
    ) as client:
        yield client


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: object,
) -> httpx.Response:
    """Make one HTTP request and require a success status.

    Args:
        client: The httpx async client to use.
        method: HTTP method (GET, DELETE, ...).
        url: Request URL.
        **kwargs: Additional keyword arguments passed to ``client.request()``.

    Returns:
        The successful :class:`httpx.Response`.

    Raises:
        TransportError: On connection errors, timeouts, or any non-2xx
            status.
    """
    try:
        response = await client.request(method, url, **kwargs)  # type: ignore[arg-type]
    except httpx.HTTPError as exc:
        log.warning('http_error', method=method, url=url, error=str(exc))
        raise TransportError(f'{method} {url} failed: {exc}') from exc

    if not response.is_success:
        log.warning('http_status', method=method, url=url, status=response.status_code)
        hint = ''
        if response.status_code in (401, 403, 404):
            hint = 'Check that TEST_TOKEN has the actions:write scope on the test repository.'
        raise TransportError(
            f'{method} {url} returned {response.status_code}: {response.text[:200]}',
            status=response.status_code,
            hint=hint,
        )

    log.debug('http_ok', method=method, url=url, status=response.status_code)
    return response


__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_TIMEOUT',
    'USER_AGENT',
    'http_client',
    'send',
]
