"""Filename classification for plot files.

Decides from the name alone whether a directory entry looks like a
supported plot file. Both the suffix and the full-string pattern must
match (case-insensitively) so unrelated or partially written files are
never handed to a header parser.

Patterns:
    native MassDB:  <ordinal>_<66 hex pubkey>_<2-digit bit length>.MASSDB
    chia plot:      plot-k<NN>-<YYYY>-<MM>-<DD>-<HH>-<mm>-<64 hex plot id>.plot
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mass_binding.plots.models import PlotFormat

__all__ = [
    "FilenamePattern",
    "classify",
    "get_pattern",
    "matches",
]


@dataclass(frozen=True)
class FilenamePattern:
    """Suffix plus anchored regex for one plot format (upper-case form)."""

    plot_format: PlotFormat
    suffix: str
    regex: re.Pattern[str]

    def matches(self, filename: str) -> bool:
        name = filename.upper()
        return name.endswith(self.suffix) and self.regex.fullmatch(name) is not None


_PATTERNS: dict[PlotFormat, FilenamePattern] = {
    PlotFormat.DEFAULT: FilenamePattern(
        plot_format=PlotFormat.DEFAULT,
        suffix=".MASSDB",
        regex=re.compile(r"^\d+_[A-F0-9]{66}_\d{2}\.MASSDB$", re.ASCII),
    ),
    PlotFormat.CHIA: FilenamePattern(
        plot_format=PlotFormat.CHIA,
        suffix=".PLOT",
        regex=re.compile(
            r"^PLOT-K\d{2}-\d{4}(-\d{2}){4}-[A-F0-9]{64}\.PLOT$", re.ASCII
        ),
    ),
}


def get_pattern(plot_format: PlotFormat) -> FilenamePattern:
    return _PATTERNS[plot_format]


def matches(filename: str, plot_format: PlotFormat) -> bool:
    """Return True if ``filename`` is a syntactically valid ``plot_format`` name."""
    return _PATTERNS[plot_format].matches(filename)


def classify(filename: str) -> PlotFormat | None:
    """Return the format whose pattern ``filename`` matches, if any."""
    for plot_format, pattern in _PATTERNS.items():
        if pattern.matches(filename):
            return plot_format
    return None
