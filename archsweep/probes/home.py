"""
Home directory probes.

Covers the freedesktop Trash, stale Neovim swap files, and a per-directory
disk usage breakdown of $HOME. Fixes only ever delete paths the probe
itself listed during check().
"""

from __future__ import annotations

from pathlib import Path

from archsweep.config import RunConfig
from archsweep.errors import ProbeCheckError
from archsweep.fixer.executor import remove_paths
from archsweep.probes.base import Probe, ProbeResult, render_lines, truncate


def _human(size_kib: int) -> str:
    """du -h style size string from a KiB count."""
    size = float(size_kib)
    for unit in ("K", "M", "G", "T"):
        if size < 1024 or unit == "T":
            return f"{size:.0f}{unit}" if unit == "K" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}T"


def _list_dir(probe_id: str, path: Path) -> list[Path]:
    try:
        return sorted(path.iterdir())
    except FileNotFoundError:
        return []
    except OSError as e:
        raise ProbeCheckError(probe_id, f"Cannot read {path}: {e.strerror or e}") from e


class TrashProbe(Probe):
    id = "trash"
    name = "Trash size"
    category = "trash"

    def __init__(self, home: Path | None = None) -> None:
        super().__init__()
        self.trash_dir = (home or Path.home()) / ".local" / "share" / "Trash"
        self.entries: tuple[Path, ...] = ()

    def check(self, config: RunConfig) -> ProbeResult:
        title = "Trash size [trash-empty]"
        if not self.trash_dir.is_dir():
            return ProbeResult(title=title, content=render_lines([]))

        # Trash/files holds the payloads, Trash/info the matching .trashinfo records
        self.entries = tuple(
            _list_dir(self.id, self.trash_dir / "files")
            + _list_dir(self.id, self.trash_dir / "info")
        )
        stdout = self.shell(["du", "-hs", str(self.trash_dir)], ok_codes=(0, 1))
        return ProbeResult(
            title=title,
            content=render_lines(stdout.splitlines()),
            fix_available=bool(self.entries),
        )

    def describe_fix(self, config: RunConfig) -> str:
        n = len(self.entries)
        return f"Permanently deletes {n} item{'s' if n != 1 else ''} from {self.trash_dir}."

    def apply_fix(self, config: RunConfig) -> None:
        remove_paths(self.id, self.entries)


class NvimSwapProbe(Probe):
    id = "nvim_swap"
    name = "NeoVim swap files"
    category = "swap"

    def __init__(self, home: Path | None = None) -> None:
        super().__init__()
        self.swap_dir = (home or Path.home()) / ".local" / "share" / "nvim" / "swap"
        self.swap_files: tuple[Path, ...] = ()

    def check(self, config: RunConfig) -> ProbeResult:
        self.swap_files = tuple(p for p in _list_dir(self.id, self.swap_dir) if p.is_file())
        n = len(self.swap_files)
        return ProbeResult(
            title=f"NeoVim swap files [rm {self.swap_dir}/*]",
            content=f"{n} files",
            fix_available=n > 0,
        )

    def describe_fix(self, config: RunConfig) -> str:
        # Swap files of a running nvim session get recreated on next write
        return (
            f"Deletes {len(self.swap_files)} swap files in {self.swap_dir}. "
            "Close any open NeoVim sessions first."
        )

    def apply_fix(self, config: RunConfig) -> None:
        remove_paths(self.id, self.swap_files)


class DiskUsageProbe(Probe):
    """Largest directories directly under $HOME, with a grand total first."""

    id = "disk_usage"
    name = "Disk usage"
    category = "disk_usage"

    def __init__(self, home: Path | None = None) -> None:
        super().__init__()
        self.home = home or Path.home()

    def check(self, config: RunConfig) -> ProbeResult:
        title = "Disk usage distribution in home directory"
        dirs = [
            p for p in _list_dir(self.id, self.home)
            if p.is_dir() and not p.is_symlink()
        ]
        if not dirs:
            return ProbeResult(title=title, content=render_lines([]))

        # du exits 1 when some subdirs are unreadable but still prints
        # a size for everything it could read
        stdout = self.shell(["du", "-sk", "--", *map(str, dirs)], ok_codes=(0, 1))
        sizes = _parse_du(stdout)
        if not sizes:
            raise ProbeCheckError(self.id, "du produced no usable output")

        ranked = sorted(sizes, key=lambda item: item[0], reverse=True)
        total = sum(size for size, _ in sizes)
        lines = [f"{_human(total)}\ttotal"] + [
            f"{_human(size)}\t{path}" for size, path in ranked
        ]
        return ProbeResult(
            title=title,
            content=render_lines(truncate(lines, config.limit(self.category))),
        )


def _parse_du(stdout: str) -> list[tuple[int, str]]:
    """Parse `du -sk` lines ("1234\t/home/me/src") into (kib, path) pairs."""
    sizes: list[tuple[int, str]] = []
    for line in stdout.splitlines():
        size, sep, path = line.partition("\t")
        if sep and size.strip().isdigit():
            sizes.append((int(size), path))
    return sizes
