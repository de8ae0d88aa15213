"""Per-format plot extractors and their registry.

An extractor turns one classified plot file into at most one
``BindingPlot``. Every extractor follows the same contract:

    1. Parse the header. A parse failure skips the file (logged, never fatal).
    2. Apply the format's inclusion rule.
         native MassDB: exclude unfinished plots unless ``list_all``
         chia plot:     exclude plots whose pool or farmer key is not owned
    3. Derive the binding target. A derivation failure propagates and
       aborts the whole scan.

The registry maps each ``PlotFormat`` to its extractor so the walker
dispatches on format instead of running parallel copies of the loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from mass_binding.plots.headers import (
    ChiaPlotInfo,
    HeaderParseError,
    parse_chia_plot,
    parse_massdb_v1,
)
from mass_binding.plots.keystore import OwnershipChecker
from mass_binding.plots.models import BindingPlot, PlotFormat, ScanConfig
from mass_binding.plots.targets import derive_chia_target, derive_massdb_target

logger = logging.getLogger(__name__)

__all__ = [
    "ChiaPlotExtractor",
    "ExtractStatus",
    "Extraction",
    "MassDBExtractor",
    "PlotExtractor",
    "get_extractor",
    "is_owned",
]


class ExtractStatus(str, Enum):
    """What happened to a classified plot file."""

    INCLUDED = "included"
    EXCLUDED = "excluded"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Extraction:
    """Result of running an extractor on one file."""

    status: ExtractStatus
    plot: BindingPlot | None = None
    reason: str = ""

    @classmethod
    def included(cls, plot: BindingPlot) -> Extraction:
        return cls(ExtractStatus.INCLUDED, plot=plot)

    @classmethod
    def excluded(cls, reason: str) -> Extraction:
        return cls(ExtractStatus.EXCLUDED, reason=reason)

    @classmethod
    def skipped(cls, reason: str) -> Extraction:
        return cls(ExtractStatus.SKIPPED, reason=reason)


@runtime_checkable
class PlotExtractor(Protocol):
    """Interface for format-specific plot extraction.

    Extractors are stateless; all run parameters arrive through the
    ``ScanConfig`` argument.
    """

    plot_format: PlotFormat

    def extract(self, path: Path, config: ScanConfig) -> Extraction:
        """Extract a binding plot from ``path``.

        Raises:
            TargetDerivationError: If the binding target cannot be derived.
        """
        ...


class MassDBExtractor:
    """Extractor for native MassDB v1 plots."""

    plot_format = PlotFormat.DEFAULT

    def extract(self, path: Path, config: ScanConfig) -> Extraction:
        try:
            info = parse_massdb_v1(path)
        except HeaderParseError as exc:
            logger.warning("Failed to read native massdb info: %s", exc)
            return Extraction.skipped(exc.reason)

        if not info.plotted and not config.list_all:
            logger.debug(
                "Excluding unfinished massdb %s (checkpoint %d)",
                path.name,
                info.checkpoint,
            )
            return Extraction.excluded("not plotted")

        target = derive_massdb_target(info.public_key, info.bit_length)
        return Extraction.included(
            BindingPlot(target=target, format=self.plot_format, size=info.bit_length)
        )


def is_owned(info: ChiaPlotInfo, keystore: OwnershipChecker | None) -> bool:
    """Check that both the pool and farmer private keys of a plot are held.

    Without a keystore every plot is considered owned. Plots bound to a
    pool contract carry no pool public key and therefore fail the check.
    """
    if keystore is None:
        return True
    if info.pool_public_key is None or not keystore.has_pool_key(
        info.pool_public_key
    ):
        return False
    return keystore.has_farmer_key(info.farmer_public_key)


class ChiaPlotExtractor:
    """Extractor for Chia-compatible plots."""

    plot_format = PlotFormat.CHIA

    def extract(self, path: Path, config: ScanConfig) -> Extraction:
        try:
            info = parse_chia_plot(path)
        except HeaderParseError as exc:
            logger.warning("Failed to read chia plot info: %s", exc)
            return Extraction.skipped(exc.reason)

        # Ownership takes precedence over list_all: chia plots have no
        # separate plotted state.
        if not is_owned(info, config.keystore):
            logger.debug("Excluding chia plot %s: private key not held", path.name)
            return Extraction.excluded("private key not held")

        target = derive_chia_target(info.plot_id, info.k)
        return Extraction.included(
            BindingPlot(target=target, format=self.plot_format, size=info.k)
        )


# =============================================================================
# Extractor Registry
# =============================================================================

_registry: dict[PlotFormat, PlotExtractor] = {}


def _register_extractor(extractor: PlotExtractor) -> None:
    """Register an extractor instance for its plot format."""
    _registry[extractor.plot_format] = extractor
    logger.debug("Registered extractor: %s", extractor.plot_format.selector)


def _auto_register() -> None:
    _register_extractor(MassDBExtractor())
    _register_extractor(ChiaPlotExtractor())


def get_extractor(plot_format: PlotFormat) -> PlotExtractor:
    """Get the registered extractor for a plot format.

    Raises:
        KeyError: If no extractor is registered for the format.
    """
    if not _registry:
        _auto_register()

    if plot_format not in _registry:
        msg = (
            f"No extractor registered for '{plot_format.selector}'. "
            f"Available: {[f.selector for f in _registry]}"
        )
        raise KeyError(msg)

    return _registry[plot_format]

