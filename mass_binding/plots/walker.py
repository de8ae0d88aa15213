"""Directory walker for plot discovery.

Walks each configured directory (non-recursively, in name order),
classifies every entry by filename and hands matches to the extractor
for the run's plot format. The cancellation token is polled before each
entry; a tripped token raises ``ScanCancelled`` and the partial plot
list is dropped by the caller.

A directory that cannot be listed aborts the scan with
``DirectoryScanError``: a partial inventory could be mistaken for a
complete one.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from mass_binding.plots.cancellation import CancellationToken
from mass_binding.plots.classifier import get_pattern
from mass_binding.plots.extractors import ExtractStatus, get_extractor
from mass_binding.plots.models import (
    BindingPlot,
    DirectoryReport,
    PlotFormat,
    ScanConfig,
)

logger = logging.getLogger(__name__)

__all__ = [
    "DirectoryScanError",
    "WalkResult",
    "list_directory",
    "walk_directories",
]


class DirectoryScanError(Exception):
    """Raised when a search directory cannot be listed."""

    def __init__(self, directory: Path, cause: OSError) -> None:
        self.directory = directory
        super().__init__(f"cannot list directory {directory}: {cause}")


@dataclass
class WalkResult:
    """Plots collected from all directories for one format."""

    plot_format: PlotFormat
    plots: list[BindingPlot] = field(default_factory=list)
    reports: list[DirectoryReport] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Plots collected before deduplication."""
        return len(self.plots)


def list_directory(directory: Path) -> list[str]:
    """Return the entry names of ``directory`` sorted by name.

    Raises:
        DirectoryScanError: If the directory cannot be listed.
    """
    try:
        with os.scandir(directory) as entries:
            return sorted(entry.name for entry in entries)
    except OSError as exc:
        raise DirectoryScanError(directory, exc) from exc


def _scan_directory(
    directory: Path,
    config: ScanConfig,
    token: CancellationToken,
    plots: list[BindingPlot],
) -> DirectoryReport:
    pattern = get_pattern(config.plot_format)
    extractor = get_extractor(config.plot_format)
    report = DirectoryReport(directory=directory, plot_format=config.plot_format)

    for name in list_directory(directory):
        token.raise_if_cancelled()

        if not pattern.matches(name):
            continue
        report.matched += 1

        path = directory / name
        if not path.is_file():
            logger.debug("Skipping %s: not a regular file", path)
            report.skipped += 1
            continue

        result = extractor.extract(path, config)
        if result.status is ExtractStatus.INCLUDED and result.plot is not None:
            plots.append(result.plot)
            report.included += 1
        elif result.status is ExtractStatus.EXCLUDED:
            report.excluded += 1
        else:
            report.skipped += 1

    return report


def walk_directories(
    config: ScanConfig, token: CancellationToken | None = None
) -> WalkResult:
    """Collect binding plots of ``config.plot_format`` from every directory.

    Args:
        config: Scan parameters (format, directories, list_all, keystore).
        token: Cancellation token polled before each directory entry.

    Returns:
        WalkResult with the concatenated plots and per-directory reports.

    Raises:
        ScanCancelled: If the token is tripped during the walk.
        DirectoryScanError: If a directory cannot be listed.
        TargetDerivationError: If a binding target cannot be derived.
    """
    token = token or CancellationToken()
    label = config.plot_format.label
    result = WalkResult(plot_format=config.plot_format)

    for directory in config.directories:
        logger.info("Searching for %s files in %s", label, directory)
        report = _scan_directory(directory, config, token, result.plots)
        result.reports.append(report)
        logger.info(
            "Loaded %d %s files from %s (matched=%d, excluded=%d, skipped=%d)",
            report.included,
            label,
            directory,
            report.matched,
            report.excluded,
            report.skipped,
        )

    logger.info(
        "Loaded %d %s files from %d directories",
        result.total,
        label,
        len(config.directories),
    )
    return result
