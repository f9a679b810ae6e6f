"""
Shared pytest fixtures.
"""
import threading
import time
from io import StringIO

import pytest
from rich.console import Console

from archsweep.config import RunConfig, build_run_config
from archsweep.errors import ProbeCheckError, ProbeFixError
from archsweep.probes.base import Probe, ProbeResult


class FakeProbe(Probe):
    """
    Scriptable probe.

    Records every check/fix call (with monotonic timestamps) into a shared
    `calls` list so tests can assert on counts and ordering.
    """

    category = "fake"

    def __init__(
        self,
        probe_id: str,
        content: str = "something",
        fix_available: bool = False,
        fail_check: bool = False,
        fail_fix: bool = False,
        fail_describe: bool = False,
        delay: float = 0.0,
        barrier: threading.Barrier | None = None,
        calls: list | None = None,
    ) -> None:
        super().__init__()
        self.id = probe_id
        self.name = probe_id
        self.content = content
        self.fix_available = fix_available
        self.fail_check = fail_check
        self.fail_fix = fail_fix
        self.fail_describe = fail_describe
        self.delay = delay
        self.barrier = barrier
        self.calls = calls if calls is not None else []
        self.captured: str | None = None

    def check(self, config: RunConfig) -> ProbeResult:
        self.calls.append(("check", self.id, time.monotonic()))
        if self.barrier is not None:
            self.barrier.wait(timeout=5)
        if self.delay:
            time.sleep(self.delay)
        if self.fail_check:
            raise ProbeCheckError(self.id, f"{self.id}: simulated I/O error")
        self.captured = f"state-of-{self.id}"
        return ProbeResult(
            title=f"{self.id} title",
            content=self.content,
            fix_available=self.fix_available,
        )

    def describe_fix(self, config: RunConfig) -> str:
        if self.fail_describe:
            raise KeyError(self.id)
        return f"would fix {self.id}"

    def apply_fix(self, config: RunConfig) -> None:
        start = time.monotonic()
        self.calls.append(("apply_start", self.id, start, self.captured))
        time.sleep(0.01)
        if self.fail_fix:
            self.calls.append(("apply_end", self.id, time.monotonic()))
            raise ProbeFixError(self.id, f"{self.id}: simulated fix failure")
        self.calls.append(("apply_end", self.id, time.monotonic()))

    def applied(self) -> int:
        return sum(1 for c in self.calls if c[0] == "apply_start" and c[1] == self.id)


def capture_console() -> tuple[Console, StringIO]:
    """Return a Console that captures output in a StringIO buffer."""
    buf = StringIO()
    con = Console(file=buf, highlight=False, no_color=True, width=200)
    return con, buf


@pytest.fixture
def consoles():
    """(console, out_buf, err_console, err_buf)"""
    con, out = capture_console()
    err, err_buf = capture_console()
    return con, out, err, err_buf


@pytest.fixture
def config():
    return build_run_config(apply=False)


@pytest.fixture
def apply_config():
    return build_run_config(apply=True)


@pytest.fixture
def fake_probe():
    """The FakeProbe class, for building scripted probe sets."""
    return FakeProbe
