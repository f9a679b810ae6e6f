"""
Report renderers.

Stdout gets one block per probe:

    Orphan packages [yay -Rns <pkg>]: (fix available)
    python-foo
    lib32-bar

Stderr gets one marked line per failure:

    check failed [orphans]: Command not found: pacman
    fix failed [orphans]: sudo pacman -Rns ... exited with code 1
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from archsweep.errors import ProbeError
from archsweep.probes.base import ProbeResult
from archsweep.ui.theme import (
    APP_NAME,
    CHECK_FAILED_PREFIX,
    COLOR_BRAND,
    COLOR_DIM,
    EMPTY_PLACEHOLDER,
    FIX_AVAILABLE_LABEL,
    FIX_FAILED_PREFIX,
    ICON_FAILED,
    ICON_FIX,
    ICON_FIXED,
    STYLE_ERROR,
    STYLE_FIX,
    STYLE_TITLE,
)


# ── Result blocks ─────────────────────────────────────────────────────────────

def format_result(result: ProbeResult) -> Group:
    """Title line, trimmed content (or placeholder), blank line."""
    title = Text()
    title.append(f"{result.title}:", style=STYLE_TITLE)
    if result.fix_available:
        title.append(f" {FIX_AVAILABLE_LABEL}", style=STYLE_FIX)

    body = result.content.strip() or EMPTY_PLACEHOLDER
    return Group(title, Text(body), Text(""))


def print_result(console: Console, result: ProbeResult) -> None:
    # soft_wrap: long paths and log lines stay on one line when piped
    console.print(format_result(result), soft_wrap=True)


# ── Error lines ───────────────────────────────────────────────────────────────

def _error_line(prefix: str, error: ProbeError) -> Text:
    line = Text()
    line.append(f"{prefix} [{error.probe_id}]:", style=STYLE_ERROR)
    # Only the first line — one error, one line
    message = str(error).strip().splitlines()
    line.append(f" {message[0] if message else type(error).__name__}")
    return line


def print_check_error(err_console: Console, error: ProbeError) -> None:
    err_console.print(_error_line(CHECK_FAILED_PREFIX, error))


def print_fix_error(err_console: Console, error: ProbeError) -> None:
    err_console.print(_error_line(FIX_FAILED_PREFIX, error))


# ── Fix session ───────────────────────────────────────────────────────────────

def print_fix_card(console: Console, title: str, description: str, idx: int, total: int) -> None:
    """Header for one fix: position, probe title, what the fix will do."""
    header = Text()
    header.append(f"{ICON_FIX} [{idx}/{total}] ", style="bold")
    header.append(title, style=STYLE_TITLE)
    console.print(header)
    if description:
        console.print(Text(f"  {description}", style=COLOR_DIM))


def print_session_summary(
    console: Console,
    fixed: int,
    failed: int,
    skipped: int,
    aborted: bool = False,
) -> None:
    """Print a Panel summarising the fix session. Failed and skipped are counted apart."""
    body = Text()
    if fixed == 0 and failed == 0:
        body.append("\n  No fixes were applied.", style=COLOR_DIM)
    else:
        s = "es" if fixed != 1 else ""
        body.append(f"\n  {ICON_FIXED}  {fixed} fix{s} applied", style="bold bright_green")
        if failed:
            body.append(f"   ·   {ICON_FAILED}  {failed} failed", style=STYLE_ERROR)
    if skipped:
        body.append(f"   ·   {skipped} skipped", style=COLOR_DIM)
    if aborted:
        body.append("\n  Fix session aborted; remaining fixes were not offered.", style="yellow")

    body.append("\n\n  Run  ", style=COLOR_DIM)
    body.append(APP_NAME, style="bold")
    body.append("  again to rescan and confirm changes took effect.\n", style=COLOR_DIM)

    if failed or aborted:
        border = "yellow"
    elif fixed:
        border = "bright_green"
    else:
        border = "dim"

    console.print()
    console.print(
        Panel(body, title="[bold]Fix session complete[/bold]", title_align="left",
              border_style=border)
    )
    console.print()


def print_probe_list(console: Console, probes: list[tuple[str, str, str]]) -> None:
    """Print the probe catalogue as "id  category  name" rows."""
    for probe_id, category, name in probes:
        line = Text()
        line.append(f"  {probe_id:<16}", style=f"bold {COLOR_BRAND}")
        line.append(f"{category:<12}", style=COLOR_DIM)
        line.append(name)
        console.print(line)
