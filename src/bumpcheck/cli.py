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

"""Command-line interface for bumpcheck.

Usage::

    bumpcheck run --fixture tests/e2e/config.yaml
    bumpcheck run --suite 'default branch' --poll-timeout 900
    bumpcheck list
    bumpcheck explain BC-RUN-CONCLUSION

A ``.env`` file in the working directory is loaded before anything else,
so ``TEST_REPO``, ``TEST_USER`` and ``TEST_TOKEN`` can live there.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from rich_argparse import RichHelpFormatter

from bumpcheck import __version__
from bumpcheck.backends import GitHubActionsClient
from bumpcheck.config import DEFAULT_FIXTURE, load_config
from bumpcheck.display import build_fixture_table, print_summary, stdout_console
from bumpcheck.errors import BumpCheckError, explain, render_error
from bumpcheck.executor import run_all
from bumpcheck.fixture import load_fixture
from bumpcheck.logging import configure_logging, get_logger

logger = get_logger('bumpcheck.cli')


async def _cmd_run(args: argparse.Namespace) -> int:
    """Handle the ``run`` subcommand."""
    config = load_config(
        scope=args.scope,
        workdir=args.workdir,
        fixture_path=args.fixture,
        source_root=args.source_root,
        poll_interval=args.poll_interval,
        poll_timeout=args.poll_timeout,
    )
    fixture = load_fixture(config.fixture_path).select(args.suite or [])
    actions = GitHubActionsClient(
        config.owner,
        config.repo,
        token=config.token,
        base_url=config.api_base_url,
    )
    logger.info('run_start', scope=config.scope, suites=len(fixture.suites), actions=repr(actions))

    results = await run_all(config, fixture, actions)
    print_summary(results)
    return 0 if all(r.ok for r in results) else 1


def _cmd_list(args: argparse.Namespace) -> int:
    """Handle the ``list`` subcommand; needs no credentials."""
    path = args.fixture or Path(os.environ.get('BUMPCHECK_FIXTURE', '') or DEFAULT_FIXTURE)
    fixture = load_fixture(path).select(args.suite or [])
    stdout_console.print(build_fixture_table(fixture))
    stdout_console.print(f'  [dim]actionFiles:[/dim] {", ".join(fixture.action_files) or "(none)"}')
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def _add_fixture_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--fixture',
        type=Path,
        default=None,
        metavar='PATH',
        help=f'Suite fixture YAML (default: $BUMPCHECK_FIXTURE or {DEFAULT_FIXTURE}).',
    )
    parser.add_argument(
        '--suite',
        action='append',
        metavar='NAME',
        help='Only run the named suite. Repeatable.',
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='bumpcheck',
        description='End-to-end harness for a version-bump GitHub Action.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Debug logging (poll attempts, suppressed git output).',
    )
    parser.add_argument(
        '--quiet',
        '-q',
        action='store_true',
        help='Only log warnings and errors.',
    )
    parser.add_argument(
        '--json-log',
        action='store_true',
        help='Emit logs as JSON lines.',
    )

    subparsers = parser.add_subparsers(dest='command')

    run_parser = subparsers.add_parser(
        'run',
        help='Provision the test repository and run every suite.',
        formatter_class=RichHelpFormatter,
    )
    _add_fixture_args(run_parser)
    run_parser.add_argument(
        '--scope',
        default=None,
        metavar='ID',
        help='Base branch for this execution (default: $BUMPCHECK_SCOPE, e2e-$GITHUB_RUN_ID, or main).',
    )
    run_parser.add_argument(
        '--workdir',
        type=Path,
        default=None,
        metavar='DIR',
        help='Scratch repository directory; wiped on start (default: ./test-repo).',
    )
    run_parser.add_argument(
        '--source-root',
        type=Path,
        default=None,
        metavar='DIR',
        help='Directory actionFiles globs are resolved against (default: .).',
    )
    run_parser.add_argument(
        '--poll-interval',
        type=float,
        default=None,
        metavar='SECS',
        help='Seconds between run-status polls (default: 1.0).',
    )
    run_parser.add_argument(
        '--poll-timeout',
        type=float,
        default=None,
        metavar='SECS',
        help='Give up on a run after SECS per polling phase; 0 waits forever (default: 0).',
    )

    list_parser = subparsers.add_parser(
        'list',
        help='List suites, scenarios and expectations.',
        formatter_class=RichHelpFormatter,
    )
    _add_fixture_args(list_parser)

    explain_parser = subparsers.add_parser(
        'explain',
        help='Explain a BC-* error code.',
        formatter_class=RichHelpFormatter,
    )
    explain_parser.add_argument('code', help='Error code, e.g. BC-RUN-CONCLUSION.')

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Exit code (0 when every scenario passed, non-zero otherwise).
    """
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        command = args.command
        if command == 'run':
            return asyncio.run(_cmd_run(args))
        if command == 'list':
            return _cmd_list(args)
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()  # noqa: T201 - CLI output
        print(  # noqa: T201 - CLI output
            f'\n{parser.prog}: error: please provide a command',
            file=sys.stderr,
        )
        return 2

    except BumpCheckError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'main',
]
