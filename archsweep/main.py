"""
archsweep — entry point and orchestrator.

CLI flags, config resolution, check phase, fix phase.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from archsweep import __version__
from archsweep.collector import collect
from archsweep.config import DEFAULT_LIMITS, build_run_config, load_config
from archsweep.errors import ConfigError, ConfirmationReadError
from archsweep.fixer.runner import run_fix_session
from archsweep.probes import ALL_PROBES, build_probes
from archsweep.scheduler import Scheduler
from archsweep.ui.report import print_probe_list
from archsweep.ui.theme import ARCHSWEEP_THEME

logger = logging.getLogger(__name__)


# ── Consoles (shared across the tool) ─────────────────────────────────────────

console = Console(theme=ARCHSWEEP_THEME, highlight=False)
err_console = Console(theme=ARCHSWEEP_THEME, highlight=False, stderr=True)


# ── CLI ───────────────────────────────────────────────────────────────────────

@click.command(name="archsweep", context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", prog_name="archsweep")
@click.option("--apply", is_flag=True, default=False,
              help="After the scan, offer each available fix and ask before applying it.")
# Caps
@click.option(
    "--max-packages",
    type=click.IntRange(min=0),
    default=None,
    help=f"Maximum explicitly installed packages to show [default: {DEFAULT_LIMITS['packages']}].",
)
@click.option(
    "--max-disk-usage",
    type=click.IntRange(min=0),
    default=None,
    help=f"Maximum disk usage lines to show [default: {DEFAULT_LIMITS['disk_usage']}].",
)
# Probe filters
@click.option("--only", metavar="IDS", default=None,
              help="Comma-separated probe ids to run, e.g. orphans,trash")
@click.option("--skip", metavar="IDS", default=None,
              help="Comma-separated probe ids to skip.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file [default: ~/.config/archsweep/config.toml].",
)
@click.option("--list", "list_probes", is_flag=True, default=False,
              help="List the available probes and exit.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging on stderr.")
def cli(
    apply: bool,
    max_packages: Optional[int],
    max_disk_usage: Optional[int],
    only: Optional[str],
    skip: Optional[str],
    config_path: Optional[Path],
    list_probes: bool,
    verbose: bool,
) -> None:
    """Clean up your Arch installation, real fast.

    Runs every maintenance probe in parallel and prints what it finds.
    Read-only by default — use --apply to be offered each fix in turn.
    """
    _configure_logging(verbose)

    if list_probes:
        print_probe_list(console, [(cls.id, cls.category, cls.name) for cls in ALL_PROBES])
        return

    # ── Startup: anything that fails here aborts before a probe runs ──────────
    try:
        file_config = load_config(config_path)
        limits = dict(file_config["limits"])
        if max_packages is not None:
            limits["packages"] = max_packages
        if max_disk_usage is not None:
            limits["disk_usage"] = max_disk_usage
        config = build_run_config(apply=apply, limits=limits)

        only_ids = _split_ids(only)
        skip_ids = _split_ids(skip) | file_config["skip"]
        probes = build_probes(only=only_ids or None, skip=skip_ids)
    except ConfigError as e:
        err_console.print(f"[error]Error:[/error] {escape(str(e))}")
        raise SystemExit(1)

    logger.debug("running %d probes with limits %s", len(probes), dict(config.limits))

    # ── Check phase (parallel) ────────────────────────────────────────────────
    scheduler = Scheduler(probes, config)
    scheduler.launch()
    run = collect(scheduler, console, err_console)

    # ── Fix phase (sequential) ────────────────────────────────────────────────
    try:
        run_fix_session(run, config, console, err_console)
    except ConfirmationReadError as e:
        err_console.print(f"[error]fix aborted:[/error] {escape(str(e))}")
        raise SystemExit(1)


def _split_ids(value: Optional[str]) -> set[str]:
    if not value:
        return set()
    return {item.strip().lower() for item in value.split(",") if item.strip()}


def _configure_logging(verbose: bool) -> None:
    """Route logging through rich on stderr; WARNING by default, DEBUG with -v."""
    root = logging.getLogger("archsweep")
    root.handlers.clear()
    root.addHandler(RichHandler(console=err_console, show_path=False, show_time=verbose))
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


# ── Entry ─────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    cli()
