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

"""structlog setup for bumpcheck.

Events go to stderr, either through structlog's console renderer (colored
when stderr is a TTY) or as JSON lines with ``--json-log``. stdout is left
to the result tables.

The executor binds ``suite`` and ``scenario`` with :func:`scenario_context`,
so every event emitted while a scenario runs carries both keys::

    with scenario_context(suite='default', scenario='feat: add widget'):
        log.info('run_completed', run_id=42, conclusion='success')

URL credentials are masked by
:func:`~bumpcheck.log_redact.redact_credentials_processor` before any
renderer sees the event.
"""

from __future__ import annotations

import logging
import sys

import structlog

from bumpcheck.log_redact import redact_credentials_processor

# httpx logs every request at INFO; one poll per second drowns the run.
_CHATTY_LOGGERS = ('httpx', 'httpcore')


def _level(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
) -> None:
    """Route structlog through the stdlib root logger on stderr.

    Safe to call again; the last call wins.

    Args:
        verbose: Debug level, which adds poll attempts, suppressed
            command output and HTTP request lines.
        quiet: Warnings and errors only. Takes precedence over
            ``verbose``.
        json_log: Render JSON lines instead of console output.
    """
    level = _level(verbose=verbose, quiet=quiet)
    logging.basicConfig(format='%(message)s', stream=sys.stderr, level=level, force=True)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose and not quiet else logging.WARNING)

    renderer: structlog.types.Processor
    if json_log:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            redact_credentials_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'bumpcheck') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger named *name*."""
    return structlog.get_logger(name)


# Context manager binding keys onto every event in the current task.
scenario_context = structlog.contextvars.bound_contextvars


__all__ = [
    'configure_logging',
    'get_logger',
    'scenario_context',
]
