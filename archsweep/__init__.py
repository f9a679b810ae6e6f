"""archsweep — Arch Linux maintenance checks, run in parallel, fixed one by one."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("archsweep")
except PackageNotFoundError:
    __version__ = "dev"

__author__ = "archsweep"
