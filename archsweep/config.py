"""
Run configuration for archsweep.

Reads ~/.config/archsweep/config.toml for default caps and skipped probes,
then freezes the merged values into a RunConfig that every check thread
shares read-only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from archsweep.errors import ConfigError

_CONFIG_PATH = Path.home() / ".config" / "archsweep" / "config.toml"

DEFAULT_LIMITS: Mapping[str, int] = MappingProxyType({
    "packages": 10,
    "disk_usage": 10,
})


@dataclass(frozen=True)
class RunConfig:
    apply: bool = False
    limits: Mapping[str, int] = field(default_factory=lambda: DEFAULT_LIMITS)

    def limit(self, category: str) -> int:
        """Return the cap for category, falling back to the built-in default."""
        if category in self.limits:
            return self.limits[category]
        return DEFAULT_LIMITS.get(category, 0)


def build_run_config(apply: bool, limits: Mapping[str, int] | None = None) -> RunConfig:
    """Merge limits over the defaults and return an immutable RunConfig."""
    merged = dict(DEFAULT_LIMITS)
    merged.update(limits or {})
    for category, cap in merged.items():
        _validate_cap(category, cap)
    return RunConfig(apply=apply, limits=MappingProxyType(merged))


def load_config(path: Path | None = None) -> dict:
    """
    Load archsweep config from a TOML file.

    Returns {"skip": set[str], "limits": dict[str, int]}.
    A missing file returns empty defaults; anything present but unusable
    raises ConfigError so the run aborts before a single probe starts.
    """
    config_path = path or _CONFIG_PATH
    empty: dict = {"skip": set(), "limits": {}}

    if not config_path.is_file():
        return empty

    try:
        raw = config_path.read_bytes()
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot parse {config_path}: {e}") from e

    skip = data.get("skip", [])
    if not isinstance(skip, list):
        raise ConfigError(f"{config_path}: 'skip' must be a list of probe ids")

    limits = data.get("limits", {})
    if not isinstance(limits, dict):
        raise ConfigError(f"{config_path}: [limits] must be a table")
    for category, cap in limits.items():
        _validate_cap(category, cap)

    return {"skip": {str(item) for item in skip}, "limits": dict(limits)}


def _validate_cap(category: str, cap: object) -> None:
    # bool is an int subclass; "packages = true" is a typo, not a cap
    if isinstance(cap, bool) or not isinstance(cap, int) or cap < 0:
        raise ConfigError(f"Limit '{category}' must be a non-negative integer, got {cap!r}")
