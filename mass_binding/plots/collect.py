"""Top-level binding list collection.

Runs the walker for the configured format and aggregates the result.
Cancellation is all-or-nothing: a tripped token discards everything
collected so far and ``collect_binding_list`` returns ``None``.

Usage:
    from mass_binding.plots import ScanConfig, PlotFormat, collect_binding_list

    config = ScanConfig.create(PlotFormat.DEFAULT, ["/mnt/plots"])
    binding_list = collect_binding_list(config)
"""

from __future__ import annotations

import logging

from mass_binding.plots.aggregator import build_binding_list
from mass_binding.plots.cancellation import CancellationToken, ScanCancelled
from mass_binding.plots.models import BindingList, DirectoryReport, ScanConfig
from mass_binding.plots.walker import walk_directories

logger = logging.getLogger(__name__)

__all__ = ["CollectResult", "collect", "collect_binding_list"]


class CollectResult:
    """Binding list plus the per-directory reports that produced it.

    ``binding_list`` is ``None`` when the scan was cancelled.
    """

    def __init__(
        self,
        binding_list: BindingList | None,
        reports: list[DirectoryReport] | None = None,
    ) -> None:
        self.binding_list = binding_list
        self.reports = reports or []

    @property
    def cancelled(self) -> bool:
        return self.binding_list is None


def collect(
    config: ScanConfig, token: CancellationToken | None = None
) -> CollectResult:
    """Scan, aggregate and deduplicate, keeping directory reports.

    Raises:
        DirectoryScanError: If a search directory cannot be listed.
        TargetDerivationError: If a binding target cannot be derived.
    """
    token = token or CancellationToken()
    logger.info(
        "Searching for %s files in %d directories",
        config.plot_format.label,
        len(config.directories),
    )
    try:
        result = walk_directories(config, token)
    except ScanCancelled as exc:
        logger.warning("Cancel searching plot files (%s)", exc)
        return CollectResult(None)

    binding_list = build_binding_list([result])
    logger.info(
        "Collected %d binding targets (default=%d, chia=%d)",
        binding_list.total_count,
        binding_list.default_count,
        binding_list.chia_count,
    )
    return CollectResult(binding_list, result.reports)


def collect_binding_list(
    config: ScanConfig, token: CancellationToken | None = None
) -> BindingList | None:
    """Build the deduplicated binding list for ``config``.

    Returns:
        The binding list, or ``None`` if the scan was cancelled.

    Raises:
        DirectoryScanError: If a search directory cannot be listed.
        TargetDerivationError: If a binding target cannot be derived.
    """
    return collect(config, token).binding_list
