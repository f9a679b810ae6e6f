"""
Core data model for archsweep probes.

ProbeResult — what one check() returns.
ProbeState  — where a probe sits in the check → confirm → fix lifecycle.
Probe       — abstract base class all probes inherit from.

A probe owns whatever it discovers during check() (package names, paths to
remove) and reads it back in apply_fix(). The orchestrator moves the probe
instance itself from the parallel check phase to the sequential fix phase,
so the same object that looked is the one that fixes.
"""

import enum
import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from archsweep.config import RunConfig
from archsweep.errors import ProbeCheckError, ProbeFixError
from archsweep.ui.theme import EMPTY_PLACEHOLDER

logger = logging.getLogger(__name__)


# ── Data model ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProbeResult:
    title: str                  # "Orphan packages [yay -Rns <pkg>]"
    content: str                # Body printed under the title
    fix_available: bool = False


class ProbeState(enum.Enum):
    PENDING = "pending"
    CHECKED_OK = "checked_ok"
    CHECK_FAILED = "check_failed"
    AWAITING_CONFIRM = "awaiting_confirm"
    APPLYING = "applying"
    FIXED = "fixed"
    FIX_FAILED = "fix_failed"
    SKIPPED = "skipped"


# ── Rendering helpers ─────────────────────────────────────────────────────────

def truncate(lines: Iterable[str], cap: int) -> list[str]:
    """
    Keep the first `cap` entries of an already most-recent-first sequence.

    Caps never fail a probe — they only shorten what it reports.
    """
    kept: list[str] = []
    if cap <= 0:
        return kept
    for line in lines:
        kept.append(line)
        if len(kept) >= cap:
            break
    return kept


def render_lines(lines: Iterable[str]) -> str:
    """Join lines into a result body, or the placeholder when there are none."""
    body = "\n".join(line for line in lines if line.strip())
    return body if body else EMPTY_PLACEHOLDER


# ── Base class ────────────────────────────────────────────────────────────────

class Probe(ABC):
    """
    Abstract base class for all archsweep probes.

    Subclasses must:
      1. Set class attributes (id, name, category)
      2. Override check() to return a ProbeResult
      3. Override describe_fix() and apply_fix() if they can fix anything

    The orchestrator calls execute(), describe() and fix(), never the
    overridden methods directly: the wrappers keep the lifecycle honest.
    """

    id: str = "base_probe"
    name: str = "Base Probe"
    category: str = "system"

    def __init__(self) -> None:
        self.state = ProbeState.PENDING
        self.result: ProbeResult | None = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} state={self.state.value}>"

    # ── Public API ────────────────────────────────────────────────────────────

    def execute(self, config: RunConfig) -> ProbeResult:
        """
        Run check() and record the outcome.

        Any exception other than ProbeCheckError is wrapped into one, so a
        bug in one probe never takes down the scan.
        """
        if self.state is not ProbeState.PENDING:
            raise ProbeCheckError(self.id, f"{self.id} was already checked in this run")
        try:
            result = self.check(config)
        except ProbeCheckError:
            self.state = ProbeState.CHECK_FAILED
            raise
        except Exception as e:
            self.state = ProbeState.CHECK_FAILED
            raise ProbeCheckError(self.id, f"Unexpected error in {self.id}: {e}") from e
        self.result = result
        self.state = ProbeState.CHECKED_OK
        return result

    def fix(self, config: RunConfig) -> None:
        """
        Run apply_fix() at most once, and only after a fixable check.

        Raises ProbeFixError on failure; the state records FIXED or FIX_FAILED.
        """
        if self.result is None or not self.result.fix_available:
            raise ProbeFixError(self.id, f"{self.id} has no fix to apply")
        if self.state not in (ProbeState.CHECKED_OK, ProbeState.AWAITING_CONFIRM):
            raise ProbeFixError(
                self.id, f"{self.id} cannot be fixed from state {self.state.value}"
            )
        self.state = ProbeState.APPLYING
        try:
            self.apply_fix(config)
        except ProbeFixError:
            self.state = ProbeState.FIX_FAILED
            raise
        except Exception as e:
            self.state = ProbeState.FIX_FAILED
            raise ProbeFixError(self.id, f"Unexpected error fixing {self.id}: {e}") from e
        self.state = ProbeState.FIXED

    def describe(self, config: RunConfig) -> str:
        """describe_fix(), with any exception raised as ProbeFixError."""
        try:
            return self.describe_fix(config)
        except ProbeFixError:
            raise
        except Exception as e:
            raise ProbeFixError(
                self.id, f"Unexpected error describing fix for {self.id}: {e}"
            ) from e

    @abstractmethod
    def check(self, config: RunConfig) -> ProbeResult:
        """
        Inspect the environment and return a ProbeResult.

        Must:
        - Only write this probe's own attributes
        - Raise ProbeCheckError when the environment can't be inspected
        - Never prompt or print
        """

    def describe_fix(self, config: RunConfig) -> str:
        """Explain what apply_fix() will do. Pure — no I/O."""
        return ""

    def apply_fix(self, config: RunConfig) -> None:
        """Apply the remediation. Raise ProbeFixError if it fails partway."""
        raise ProbeFixError(self.id, f"{self.id} has no fix action")

    # ── Helper methods ────────────────────────────────────────────────────────

    def has_tool(self, tool: str) -> bool:
        """Return True if tool is available in PATH."""
        return shutil.which(tool) is not None

    def shell(
        self,
        cmd: list[str],
        ok_codes: tuple[int, ...] = (0,),
        stdin_devnull: bool = False,
    ) -> str:
        """
        Run a subprocess and return its stdout.

        Args:
            cmd:           Argument list, never built from user input.
            ok_codes:      Exit codes that still count as a usable answer.
            stdin_devnull: Close stdin so interactive tools see EOF and
                           stop at their first prompt (dry run).

        Raises:
            ProbeCheckError on a missing binary, an OS error, or an exit
            code outside ok_codes.
        """
        # Force C locale so tool output is always English and parseable.
        _env = {**os.environ, "LANG": "C", "LC_ALL": "C"}
        logger.debug("%s: running %s", self.id, " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                env=_env,
                stdin=subprocess.DEVNULL if stdin_devnull else None,
            )
        except FileNotFoundError as e:
            raise ProbeCheckError(self.id, f"Command not found: {cmd[0]}") from e
        except OSError as e:
            raise ProbeCheckError(self.id, f"Could not run {cmd[0]}: {e}") from e

        if proc.returncode not in ok_codes:
            err = proc.stderr.strip().splitlines()
            detail = err[-1] if err else f"exit {proc.returncode}"
            raise ProbeCheckError(self.id, f"{' '.join(cmd)} failed: {detail}")
        return proc.stdout
