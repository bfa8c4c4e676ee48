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

"""Rich tables for suite results and fixture listings.

Tables go to stdout; logs and errors stay on stderr.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from bumpcheck.fixture import Fixture
from bumpcheck.report import expectation_text
from bumpcheck.types import ScenarioResult, Status, SuiteResult

# Status → (emoji, style) for the summary table.
_STATUS_DISPLAY: dict[Status, tuple[str, str]] = {
    Status.PENDING: ('◌', 'dim'),
    Status.RUNNING: ('⟳', 'bold blue'),
    Status.PASSED: ('✅', 'bold green'),
    Status.FAILED: ('❌', 'bold red'),
    Status.SKIPPED: ('⏭️ ', 'bold yellow'),
}

stdout_console = Console()


def elapsed_str(secs: float) -> str:
    """Format elapsed seconds as ``Xm Ys`` or ``Ys``."""
    if secs <= 0:
        return '—'
    mins = int(secs) // 60
    sec = secs - mins * 60
    if mins > 0:
        return f'{mins}m {sec:.1f}s'
    return f'{sec:.1f}s'


def status_emoji(status: Status) -> str:
    """Return the emoji string for *status*."""
    return _STATUS_DISPLAY[status][0]


def status_style(status: Status) -> str:
    """Return the Rich style string for *status*."""
    return _STATUS_DISPLAY[status][1]


def build_detail_text(result: ScenarioResult, *, max_error_len: int = 100) -> str:
    """Build the detail column for one scenario row.

    Returns:
        ``run 42 · success`` for passes, the failing state and error for
        failures, ``''`` otherwise.
    """
    parts: list[str] = []
    if result.run is not None:
        parts.append(f'run {result.run.id}')
        if result.run.conclusion:
            parts.append(result.run.conclusion)
    if result.status is Status.FAILED:
        if result.failed_at is not None:
            parts.append(f'at {result.failed_at.value}')
        if result.mismatches:
            parts.extend(f'{m.field}: {m.expected!r} ≠ {m.actual!r}' for m in result.mismatches)
        elif result.error_message:
            parts.append(result.error_message[:max_error_len])
    elif result.status is Status.SKIPPED:
        parts.append('earlier scenario failed')
    return ' · '.join(parts)


def build_summary_table(results: Sequence[SuiteResult]) -> Table:
    """Build the final per-scenario results table."""
    table = Table(
        title='📊 Version Bump Results',
        box=box.HEAVY_HEAD,
        title_style='bold cyan',
        border_style='bright_black',
        header_style='bold white',
        expand=False,
        pad_edge=True,
        show_lines=False,
    )
    table.add_column('', width=3, justify='center')
    table.add_column('Suite', style='bold', min_width=16)
    table.add_column('Commit message', min_width=24)
    table.add_column('Result', min_width=10)
    table.add_column('Time', justify='right', min_width=8)
    table.add_column('Details', ratio=1, style='dim')

    for suite in results:
        for result in suite.scenarios:
            table.add_row(
                status_emoji(result.status),
                suite.name,
                result.message,
                Text(result.status.value.upper(), style=status_style(result.status)),
                elapsed_str(result.elapsed_s),
                build_detail_text(result),
            )
    return table


def build_fixture_table(fixture: Fixture) -> Table:
    """Build a table listing every suite's scenarios and expectations."""
    table = Table(
        title='🧪 Suites',
        box=box.ROUNDED,
        title_style='bold cyan',
        border_style='dim',
        header_style='bold',
        show_lines=True,
    )
    table.add_column('Suite', style='bold')
    table.add_column('#', justify='right')
    table.add_column('Commit message')
    table.add_column('Expectation', style='cyan')
    for suite in fixture.suites:
        for index, scenario in enumerate(suite.scenarios, start=1):
            table.add_row(suite.name, str(index), scenario.message, expectation_text(scenario.expected))
    return table


def print_summary(results: Sequence[SuiteResult], *, console: Console | None = None) -> None:
    """Print the results table and the aggregated counts."""
    out = console or stdout_console
    scenarios = [s for suite in results for s in suite.scenarios]
    passed = sum(1 for s in scenarios if s.status is Status.PASSED)
    failed = sum(1 for s in scenarios if s.status is Status.FAILED)
    skipped = sum(1 for s in scenarios if s.status is Status.SKIPPED)
    total_time = sum(s.elapsed_s for s in scenarios)

    out.print(build_summary_table(results))
    parts: list[str] = []
    if passed:
        parts.append(f'[bold green]✅ {passed} passed[/bold green]')
    if failed:
        parts.append(f'[bold red]❌ {failed} failed[/bold red]')
    if skipped:
        parts.append(f'[bold yellow]⏭️  {skipped} skipped[/bold yellow]')
    if not parts:
        parts.append('[dim]no scenarios[/dim]')
    out.print()
    out.print(f'  {" · ".join(parts)}  [dim]({elapsed_str(total_time)} total)[/dim]')
    out.print()


__all__ = [
    'build_detail_text',
    'build_fixture_table',
    'build_summary_table',
    'elapsed_str',
    'print_summary',
    'status_emoji',
    'status_style',
]
