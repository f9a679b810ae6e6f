"""
Fix session orchestrator.

Pure sequential 1:1 fix flow — each fixable probe is shown with what its
fix will do, the user answers y or anything else, then the fix runs.
Nothing here runs concurrently: one prompt, one answer, one fix at a time.

Per probe:
  AWAITING_CONFIRM → "y"   → APPLYING → FIXED | FIX_FAILED
  AWAITING_CONFIRM → other → SKIPPED
  describe_fix() raises  → FIX_FAILED, never prompted

A failed fix is reported and the session moves on. A failed read of the
answer raises ConfirmationReadError and ends the session; fixes already
applied stay applied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from rich.console import Console
from rich.text import Text

from archsweep.collector import Run, RunEntry
from archsweep.config import RunConfig
from archsweep.errors import ConfirmationReadError, ProbeFixError
from archsweep.probes.base import ProbeState
from archsweep.ui.report import print_fix_card, print_fix_error, print_session_summary
from archsweep.ui.theme import COLOR_DIM, ICON_FIXED, ICON_SKIPPED

logger = logging.getLogger(__name__)

_PROMPT = "  Apply this fix? [y/N] "
_AFFIRMATIVE = "y"


@dataclass
class FixReport:
    """Terminal state of every probe the session offered a fix for, in order."""

    outcomes: list[tuple[str, ProbeState]] = field(default_factory=list)
    aborted: bool = False

    def count(self, state: ProbeState) -> int:
        return sum(1 for _, s in self.outcomes if s is state)

    @property
    def fixed(self) -> int:
        return self.count(ProbeState.FIXED)

    @property
    def failed(self) -> int:
        return self.count(ProbeState.FIX_FAILED)

    @property
    def skipped(self) -> int:
        return self.count(ProbeState.SKIPPED)


# ── Public API ────────────────────────────────────────────────────────────────

def run_fix_session(
    run: Run,
    config: RunConfig,
    console: Console,
    err_console: Console,
    ask: Callable[[], str] | None = None,
) -> FixReport:
    """
    Offer every available fix, one at a time, in Run order.

    Args:
        run:         Collected outcomes; only successful checks are in it.
        config:      Run configuration. Without config.apply nothing happens.
        console:     Rich Console for cards, markers and the summary.
        err_console: Rich Console for fix failure lines.
        ask:         Reads one line of confirmation. Defaults to console.input().

    Raises:
        ConfirmationReadError when the confirmation can't be read.
    """
    report = FixReport()
    if not config.apply:
        return report

    fixable = run.fixable
    if not fixable:
        console.print("  [dim]Nothing to fix.[/dim]")
        console.print()
        return report

    read_answer = ask or (lambda: console.input(Text(_PROMPT, style="bold")))

    total = len(fixable)
    try:
        for idx, entry in enumerate(fixable, 1):
            state = _offer_fix(entry, idx, total, config, console, err_console, read_answer)
            report.outcomes.append((entry.probe.id, state))
    except ConfirmationReadError:
        report.aborted = True
        raise
    finally:
        print_session_summary(
            console, report.fixed, report.failed, report.skipped, aborted=report.aborted,
        )
    return report


# ── One fix ───────────────────────────────────────────────────────────────────

def _offer_fix(
    entry: RunEntry,
    idx: int,
    total: int,
    config: RunConfig,
    console: Console,
    err_console: Console,
    ask: Callable[[], str],
) -> ProbeState:
    probe = entry.probe
    try:
        description = probe.describe(config)
    except ProbeFixError as e:
        probe.state = ProbeState.FIX_FAILED
        print_fix_error(err_console, e)
        console.print()
        return probe.state
    print_fix_card(console, entry.result.title, description, idx, total)

    probe.state = ProbeState.AWAITING_CONFIRM
    try:
        answer = ask()
    except (EOFError, KeyboardInterrupt, OSError) as e:
        raise ConfirmationReadError(
            f"Could not read confirmation for {probe.id}: {type(e).__name__}"
        ) from e

    if answer.strip() != _AFFIRMATIVE:
        probe.state = ProbeState.SKIPPED
        console.print(Text(f"  {ICON_SKIPPED} Skipped.", style=COLOR_DIM))
        console.print()
        return probe.state

    logger.debug("applying fix for %s", probe.id)
    try:
        probe.fix(config)
    except ProbeFixError as e:
        probe.state = ProbeState.FIX_FAILED
        print_fix_error(err_console, e)
        console.print()
        return probe.state

    console.print(f"  [pass]{ICON_FIXED}  Done.[/pass]")
    console.print()
    return probe.state
