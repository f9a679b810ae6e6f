"""
Error hierarchy for archsweep.

ProbeCheckError and ProbeFixError stay local to the probe that raised them.
ConfirmationReadError aborts the rest of the fix session.
ConfigError aborts startup before any probe runs.
"""


class ArchsweepError(Exception):
    """Base class for every error archsweep raises on purpose."""


class ConfigError(ArchsweepError):
    """The config file could not be read, parsed or validated."""


class ProbeError(ArchsweepError):
    """A probe failed. Carries the id of the probe that failed."""

    def __init__(self, probe_id: str, message: str) -> None:
        super().__init__(message)
        self.probe_id = probe_id
        self.message = message

    def __str__(self) -> str:
        return self.message


class ProbeCheckError(ProbeError):
    """The environment could not be inspected (missing binary, unreadable path, bad output)."""


class ProbeFixError(ProbeError):
    """A remediation action failed partway."""


class ConfirmationReadError(ArchsweepError):
    """The interactive input stream closed or failed while asking for consent."""
