"""
Probe registry.

ALL_PROBES is the fixed, compiled-in probe list, in catalogue order.
build_probes() instantiates a fresh set for one run.
"""

from __future__ import annotations

from archsweep.errors import ConfigError
from archsweep.probes.base import Probe
from archsweep.probes.home import DiskUsageProbe, NvimSwapProbe, TrashProbe
from archsweep.probes.pacman import (
    DevelUpdatesProbe,
    LastInstalledProbe,
    OrphansProbe,
    PacmanCacheProbe,
)

ALL_PROBES: tuple[type[Probe], ...] = (
    LastInstalledProbe,
    OrphansProbe,
    PacmanCacheProbe,
    TrashProbe,
    DevelUpdatesProbe,
    NvimSwapProbe,
    DiskUsageProbe,
)

PROBE_IDS: tuple[str, ...] = tuple(cls.id for cls in ALL_PROBES)


def build_probes(
    only: set[str] | None = None,
    skip: set[str] | None = None,
) -> list[Probe]:
    """
    Return new probe instances to run, in catalogue order.

    Raises ConfigError on an id that names no probe, so a typo in --only
    never silently runs nothing.
    """
    skip = skip or set()
    unknown = ((only or set()) | skip) - set(PROBE_IDS)
    if unknown:
        raise ConfigError(
            f"Unknown probe id(s): {', '.join(sorted(unknown))}. "
            f"Known: {', '.join(PROBE_IDS)}"
        )

    probes = [cls() for cls in ALL_PROBES]
    if only:
        probes = [p for p in probes if p.id in only]
    return [p for p in probes if p.id not in skip]
