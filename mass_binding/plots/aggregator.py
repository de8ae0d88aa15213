"""Merge walker results into a deduplicated binding list."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from mass_binding.plots.models import BindingList, BindingPlot, PlotFormat
from mass_binding.plots.walker import WalkResult

logger = logging.getLogger(__name__)

__all__ = ["build_binding_list", "remove_duplicates"]


def remove_duplicates(plots: Iterable[BindingPlot]) -> list[BindingPlot]:
    """Drop plots whose target already appeared earlier (first one wins)."""
    seen: set[bytes] = set()
    unique: list[BindingPlot] = []
    for plot in plots:
        if plot.target in seen:
            continue
        seen.add(plot.target)
        unique.append(plot)
    return unique


def build_binding_list(results: Iterable[WalkResult]) -> BindingList:
    """Merge per-format walk results into one binding list.

    Order is preserved across results and within each result.
    ``default_count`` and ``chia_count`` are the per-format tallies before
    deduplication; ``total_count`` is the deduplicated length.
    """
    merged: list[BindingPlot] = []
    counts = {PlotFormat.DEFAULT: 0, PlotFormat.CHIA: 0}
    for result in results:
        merged.extend(result.plots)
        counts[result.plot_format] += result.total

    plots = remove_duplicates(merged)
    if len(plots) != len(merged):
        logger.info("Removed %d duplicate binding targets", len(merged) - len(plots))

    return BindingList(
        plots=tuple(plots),
        total_count=len(plots),
        default_count=counts[PlotFormat.DEFAULT],
        chia_count=counts[PlotFormat.CHIA],
    )
