"""
Fix executors — the building blocks probes use inside apply_fix().

Each function:
  - Performs one remediation action
  - Streams output where applicable
  - Returns None on success, raises ProbeFixError on failure

Functions:
  run_fix_command — run an argv list, output streamed live
  remove_paths    — delete files/directories a probe discovered during check
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from archsweep.errors import ProbeFixError
from archsweep.ui.theme import ARCHSWEEP_THEME

logger = logging.getLogger(__name__)

_console: Console | None = None


def _default_console() -> Console:
    global _console
    if _console is None:
        _console = Console(theme=ARCHSWEEP_THEME, highlight=False)
    return _console


# ── Commands — stream output ──────────────────────────────────────────────────

def run_fix_command(
    probe_id: str,
    cmd: list[str],
    console: Console | None = None,
) -> None:
    """
    Run cmd with live output streaming.

    cmd is always built by the probe from what it found during check()
    (not user input), and is passed as a list — no shell involved.
    stdin is inherited so sudo and pacman can still ask for a password.
    """
    con = console or _default_console()
    con.print(f"  [dim]$[/dim]  [command]{escape(shlex.join(cmd))}[/command]")
    con.print()
    logger.debug("%s: fix command %s", probe_id, cmd)

    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
        )
    except FileNotFoundError as e:
        raise ProbeFixError(probe_id, f"Command not found: {cmd[0]}") from e
    except OSError as e:
        raise ProbeFixError(probe_id, f"Could not run {cmd[0]}: {e}") from e

    if proc.stdout is not None:
        for line in proc.stdout:
            stripped = line.rstrip()
            if stripped:
                con.print(Text(f"  {stripped}", style="dim"))

    returncode = proc.wait()
    if returncode != 0:
        raise ProbeFixError(probe_id, f"{shlex.join(cmd)} exited with code {returncode}")


# ── Paths — remove what check() discovered ────────────────────────────────────

def remove_paths(probe_id: str, paths: Iterable[Path]) -> int:
    """
    Delete each path (file, symlink or directory tree).

    Paths that already vanished are not an error. Every path is attempted
    before failing, so one stuck file doesn't leave the rest behind.

    Returns the number of paths removed.
    """
    removed = 0
    failures: list[str] = []
    for path in paths:
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
            removed += 1
        except FileNotFoundError:
            continue
        except OSError as e:
            failures.append(f"{path}: {e.strerror or e}")

    if failures:
        raise ProbeFixError(
            probe_id,
            f"Removed {removed}, could not remove {len(failures)}: {failures[0]}",
        )
    return removed
