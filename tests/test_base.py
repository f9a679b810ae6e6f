"""
Tests for probes/base.py.

Covers:
  - Probe.execute() state transitions and error wrapping
  - Probe.fix() at-most-once and checked-and-fixable guards
  - truncate() / render_lines() placeholders and caps
  - Probe.shell() error handling
"""

import pytest

from archsweep.config import RunConfig
from archsweep.errors import ProbeCheckError, ProbeFixError
from archsweep.probes.base import Probe, ProbeResult, ProbeState, render_lines, truncate


# ── Concrete probe stubs ──────────────────────────────────────────────────────

class _AlwaysFixable(Probe):
    """Minimal concrete probe that always offers a fix."""
    id = "always_fixable"
    name = "Always Fixable"

    def __init__(self) -> None:
        super().__init__()
        self.applied = 0

    def check(self, config: RunConfig) -> ProbeResult:
        return ProbeResult(title="Always fixable", content="x", fix_available=True)

    def apply_fix(self, config: RunConfig) -> None:
        self.applied += 1


class _NothingToFix(Probe):
    id = "nothing_to_fix"

    def check(self, config: RunConfig) -> ProbeResult:
        return ProbeResult(title="Nothing", content="(none)")


class _AlwaysCrash(Probe):
    """Probe that raises a non-ProbeError exception inside check()."""
    id = "always_crash"

    def check(self, config: RunConfig) -> ProbeResult:
        raise RuntimeError("boom")


class _CrashingFix(_AlwaysFixable):
    id = "crashing_fix"

    def apply_fix(self, config: RunConfig) -> None:
        raise KeyError("gone")


class _NoOp(Probe):
    id = "noop"

    def check(self, config: RunConfig) -> ProbeResult:
        return ProbeResult(title="noop", content="")


# ── execute() ─────────────────────────────────────────────────────────────────

class TestExecute:
    def test_success_records_result_and_state(self, config):
        probe = _NothingToFix()
        result = probe.execute(config)
        assert probe.state is ProbeState.CHECKED_OK
        assert probe.result is result

    def test_new_probe_is_pending(self):
        assert _NothingToFix().state is ProbeState.PENDING

    def test_unexpected_exception_is_wrapped(self, config):
        probe = _AlwaysCrash()
        with pytest.raises(ProbeCheckError) as exc_info:
            probe.execute(config)
        assert exc_info.value.probe_id == "always_crash"
        assert "boom" in str(exc_info.value)
        assert probe.state is ProbeState.CHECK_FAILED

    def test_probe_check_error_passes_through(self, config, fake_probe):
        probe = fake_probe("io", fail_check=True)
        with pytest.raises(ProbeCheckError, match="simulated I/O error"):
            probe.execute(config)
        assert probe.result is None

    def test_second_execute_is_refused(self, config):
        probe = _NothingToFix()
        probe.execute(config)
        with pytest.raises(ProbeCheckError, match="already checked"):
            probe.execute(config)


# ── fix() ─────────────────────────────────────────────────────────────────────

class TestFix:
    def test_fix_runs_apply_once_and_marks_fixed(self, apply_config):
        probe = _AlwaysFixable()
        probe.execute(apply_config)
        probe.fix(apply_config)
        assert probe.applied == 1
        assert probe.state is ProbeState.FIXED

    def test_second_fix_is_refused(self, apply_config):
        probe = _AlwaysFixable()
        probe.execute(apply_config)
        probe.fix(apply_config)
        with pytest.raises(ProbeFixError):
            probe.fix(apply_config)
        assert probe.applied == 1

    def test_fix_before_check_is_refused(self, apply_config):
        probe = _AlwaysFixable()
        with pytest.raises(ProbeFixError, match="no fix"):
            probe.fix(apply_config)
        assert probe.applied == 0

    def test_fix_without_fix_available_is_refused(self, apply_config):
        probe = _NothingToFix()
        probe.execute(apply_config)
        with pytest.raises(ProbeFixError):
            probe.fix(apply_config)

    def test_unexpected_fix_exception_is_wrapped(self, apply_config):
        probe = _CrashingFix()
        probe.execute(apply_config)
        with pytest.raises(ProbeFixError) as exc_info:
            probe.fix(apply_config)
        assert exc_info.value.probe_id == "crashing_fix"
        assert probe.state is ProbeState.FIX_FAILED

    def test_default_describe_fix_is_empty(self, config):
        assert _NoOp().describe_fix(config) == ""


# ── Rendering helpers ─────────────────────────────────────────────────────────

class TestTruncate:
    def test_keeps_first_entries(self):
        assert truncate(["c", "b", "a"], 2) == ["c", "b"]

    def test_cap_larger_than_input(self):
        assert truncate(["a"], 10) == ["a"]

    def test_zero_cap_keeps_nothing(self):
        assert truncate(["a", "b"], 0) == []

    def test_consumes_generators_lazily(self):
        def endless():
            n = 0
            while True:
                yield str(n)
                n += 1
        assert truncate(endless(), 3) == ["0", "1", "2"]


class TestRenderLines:
    def test_empty_renders_placeholder(self):
        assert render_lines([]) == "(none)"

    def test_blank_lines_only_renders_placeholder(self):
        assert render_lines(["", "   "]) == "(none)"

    def test_lines_are_joined(self):
        assert render_lines(["a", "b"]) == "a\nb"


# ── shell() ───────────────────────────────────────────────────────────────────

class TestShellHelper:
    def test_successful_command_returns_stdout(self):
        assert "hello" in _NoOp().shell(["echo", "hello"])

    def test_missing_binary_raises_check_error(self):
        with pytest.raises(ProbeCheckError, match="Command not found"):
            _NoOp().shell(["this_command_definitely_does_not_exist_9999"])

    def test_unexpected_exit_code_raises_with_stderr(self):
        with pytest.raises(ProbeCheckError, match="oops"):
            _NoOp().shell(["sh", "-c", "echo oops >&2; exit 3"])

    def test_ok_codes_accept_nonzero_exit(self):
        assert _NoOp().shell(["sh", "-c", "echo partial; exit 1"], ok_codes=(0, 1)) == "partial\n"

    def test_stdin_devnull_gives_eof(self):
        out = _NoOp().shell(["sh", "-c", "read x || echo eof"], stdin_devnull=True)
        assert "eof" in out

    def test_error_carries_probe_id(self):
        with pytest.raises(ProbeCheckError) as exc_info:
            _NoOp().shell(["false"])
        assert exc_info.value.probe_id == "noop"
