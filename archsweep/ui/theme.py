"""
archsweep visual design system.

All colors, styles, and markers as named constants.
Import from here — never hardcode markup strings in other modules.

NO_COLOR and TERM=dumb are honoured by rich itself.
"""

from rich.style import Style
from rich.theme import Theme


# ── Brand ─────────────────────────────────────────────────────────────────────

APP_NAME = "archsweep"


# ── Color palette ─────────────────────────────────────────────────────────────

COLOR_TITLE    = "cyan"         # Probe titles, same as the classic \x1b[36m
COLOR_FIX      = "#D4870A"      # Amber — "(fix available)"
COLOR_PASS     = "#4DBD74"      # Calm sage-green
COLOR_ERROR    = "#E05252"      # Warm severity red
COLOR_BRAND    = "#1793D1"      # Arch blue
COLOR_DIM      = "#787878"      # Medium gray
COLOR_COMMAND  = "#C0C0C0"      # Light silver — commands stand out from dim text


# ── Rich styles ───────────────────────────────────────────────────────────────

STYLE_TITLE = Style(color=COLOR_TITLE, bold=True)
STYLE_FIX   = Style(color=COLOR_FIX)
STYLE_ERROR = Style(color=COLOR_ERROR, bold=True)


# ── Markers ───────────────────────────────────────────────────────────────────

ICON_FIXED   = "✅"
ICON_FAILED  = "❌"
ICON_SKIPPED = "⏭️ "
ICON_FIX     = "🔧"

FIX_AVAILABLE_LABEL = "(fix available)"
EMPTY_PLACEHOLDER   = "(none)"

CHECK_FAILED_PREFIX = "check failed"
FIX_FAILED_PREFIX   = "fix failed"


# ── Rich Theme ────────────────────────────────────────────────────────────────

ARCHSWEEP_THEME = Theme(
    {
        "title":   f"{COLOR_TITLE} bold",
        "fix":     COLOR_FIX,
        "pass":    f"{COLOR_PASS} bold",
        "error":   f"{COLOR_ERROR} bold",
        "brand":   f"{COLOR_BRAND} bold",
        "dim":     COLOR_DIM,
        "command": COLOR_COMMAND,
    }
)
