"""Rich output selection for CLI summaries.

Summary tables are only drawn on an interactive terminal. Plain status
lines (``collected N plot files.``) are always printed with ``click.echo``
so scripts parsing stdout see the same text either way.

Detection order:
1. ``MASS_BINDING_RICH`` (see ``settings.get_rich_override``)
2. ``NO_COLOR`` or ``CI`` set: plain output
3. otherwise whether stdout is a TTY
"""

from __future__ import annotations

import os
import sys

from rich.console import Console

from mass_binding.settings import get_rich_override


def should_use_rich() -> bool:
    """Return True when rich tables should be printed."""
    override = get_rich_override()
    if override is not None:
        return override

    if os.environ.get("NO_COLOR") is not None or os.environ.get("CI"):
        return False

    isatty = getattr(sys.stdout, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # stdout already closed
        return False


def make_console() -> Console:
    """Console bound to the current stdout, colourless unless rich is on."""
    rich = should_use_rich()
    return Console(no_color=not rich, highlight=rich, soft_wrap=not rich)
