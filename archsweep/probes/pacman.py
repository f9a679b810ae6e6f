"""
Package manager probes.

pacman, paccache and yay are the only tools touched here. Every fix runs
through sudo or yay, which ask for a password on the terminal themselves.
"""

from __future__ import annotations

from pathlib import Path

from archsweep.config import RunConfig
from archsweep.errors import ProbeCheckError
from archsweep.fixer.executor import run_fix_command
from archsweep.probes.base import Probe, ProbeResult, render_lines, truncate

PACMAN_LOG = Path("/var/log/pacman.log")


class LastInstalledProbe(Probe):
    """
    Most recently installed packages that are still explicitly installed.

    Needs pacman 5.2+ log lines:
        [2024-03-02T10:11:12+0100] [ALPM] installed ripgrep (14.1.0-1)
    """

    id = "last_installed"
    name = "Last installed packages"
    category = "packages"

    def __init__(self, log_path: Path | None = None) -> None:
        super().__init__()
        self.log_path = log_path or PACMAN_LOG

    def check(self, config: RunConfig) -> ProbeResult:
        cap = config.limit(self.category)
        installed = set(self.shell(["pacman", "-Qqe"]).split())

        try:
            lines = self.log_path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            raise ProbeCheckError(self.id, f"Cannot read {self.log_path}: {e.strerror or e}") from e

        return ProbeResult(
            title=f"Last {cap} explicitly installed packages [yay -Rns <pkg>]",
            content=render_lines(truncate(_installed_entries(lines, installed), cap)),
        )


def _installed_entries(lines: list[str], installed: set[str]):
    """Yield "time pkg version" for still-installed packages, newest first, once each."""
    seen: set[str] = set()
    for line in reversed(lines):
        parts = line.split()
        if len(parts) < 5:
            continue
        stamp, _, action, pkg, version = parts[:5]
        if action != "installed" or pkg not in installed or pkg in seen:
            continue
        seen.add(pkg)
        yield f"{stamp} {pkg} {version}"


class OrphansProbe(Probe):
    id = "orphans"
    name = "Orphan packages"
    category = "orphans"

    def __init__(self) -> None:
        super().__init__()
        self.orphans: tuple[str, ...] = ()

    def check(self, config: RunConfig) -> ProbeResult:
        # pacman exits 1 with empty output when there are no orphans
        stdout = self.shell(["pacman", "-Qqtd"], ok_codes=(0, 1))
        self.orphans = tuple(stdout.split())
        return ProbeResult(
            title="Orphan packages [yay -Rns <pkg>]",
            content=render_lines(self.orphans),
            fix_available=bool(self.orphans),
        )

    def describe_fix(self, config: RunConfig) -> str:
        n = len(self.orphans)
        return (
            f"Removes {n} orphan package{'s' if n != 1 else ''} together with "
            f"their unneeded dependencies and config backups "
            f"(sudo pacman -Rns): {', '.join(self.orphans)}"
        )

    def apply_fix(self, config: RunConfig) -> None:
        run_fix_command(self.id, ["sudo", "pacman", "-Rns", "--noconfirm", "--", *self.orphans])


class PacmanCacheProbe(Probe):
    id = "pacman_cache"
    name = "Package cache"
    category = "cache"

    def check(self, config: RunConfig) -> ProbeResult:
        stdout = self.shell(["paccache", "-d", "-v", "--nocolor"])
        # "==> finished dry run: 3 candidates (disk space saved: 120.5 MiB)"
        # "==> no candidate packages found for pruning"
        fixable = "finished dry run" in stdout and "no candidate" not in stdout
        return ProbeResult(
            title="Cache cleaning [paccache -r]",
            content=render_lines(stdout.splitlines()),
            fix_available=fixable,
        )

    def describe_fix(self, config: RunConfig) -> str:
        return (
            "Deletes cached package files, keeping the three most recent "
            "versions of each package (sudo paccache -r)."
        )

    def apply_fix(self, config: RunConfig) -> None:
        run_fix_command(self.id, ["sudo", "paccache", "-r"])


class DevelUpdatesProbe(Probe):
    id = "devel_updates"
    name = "Developer package updates"
    category = "updates"

    def __init__(self) -> None:
        super().__init__()
        self.updates: tuple[str, ...] = ()

    def check(self, config: RunConfig) -> ProbeResult:
        # stdin closed: yay lists pending updates, then hits EOF at its prompt
        stdout = self.shell(
            ["yay", "-Sua", "--confirm", "--devel"],
            ok_codes=(0, 1),
            stdin_devnull=True,
        )
        self.updates = tuple(
            line.strip() for line in stdout.splitlines() if "devel/" in line
        )
        return ProbeResult(
            title="Developer updates [yay -Syu --devel]",
            content=render_lines(self.updates),
            fix_available=bool(self.updates),
        )

    def describe_fix(self, config: RunConfig) -> str:
        n = len(self.updates)
        return f"Rebuilds {n} VCS package{'s' if n != 1 else ''} from their latest upstream commit (yay -Syu --devel)."

    def apply_fix(self, config: RunConfig) -> None:
        run_fix_command(self.id, ["yay", "-Syu", "--devel", "--noconfirm"])
