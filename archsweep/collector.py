"""
Result collector.

Drains the scheduler's channel, prints each outcome the moment it arrives,
and keeps the probe instances whose check succeeded for the fix phase.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console

from archsweep.probes.base import Probe, ProbeResult
from archsweep.scheduler import Completion, Scheduler
from archsweep.ui.report import print_check_error, print_result


@dataclass
class RunEntry:
    probe: Probe
    result: ProbeResult


@dataclass
class Run:
    """Everything collected for one invocation, in completion order."""

    entries: list[RunEntry] = field(default_factory=list)
    failures: list[Completion] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def fixable(self) -> list[RunEntry]:
        return [e for e in self.entries if e.result.fix_available]


def collect(scheduler: Scheduler, console: Console, err_console: Console) -> Run:
    """
    Consume every completion until the channel closes, then join the scheduler.

    A failed check is reported once on err_console and never enters the
    Run, so its probe can't reach the fix phase.
    """
    if not scheduler.launched:
        raise RuntimeError("collect() needs a launched scheduler")
    run = Run()
    try:
        for completion in scheduler.channel:
            if completion.ok:
                print_result(console, completion.result)
                run.entries.append(RunEntry(completion.probe, completion.result))
            else:
                print_check_error(err_console, completion.error)
                run.failures.append(completion)
    finally:
        scheduler.join()
    return run
