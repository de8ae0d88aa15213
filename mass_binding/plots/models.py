"""Data models for plot discovery and binding lists.

Runtime structures shared by the walker, extractors and aggregator:

- PlotFormat: proof type of a plot file (native MassDB or Chia-compatible)
- BindingPlot: one binding target produced from one plot file
- BindingList: the deduplicated report handed to the writer
- ScanConfig: immutable per-invocation scan parameters
- DirectoryReport: per-directory counters for logging and CLI summaries
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mass_binding.plots.keystore import OwnershipChecker

__all__ = [
    "BindingList",
    "BindingPlot",
    "DirectoryReport",
    "PlotFormat",
    "ScanConfig",
]


class PlotFormat(IntEnum):
    """Proof type of a plot file.

    The integer value is the ``type`` field written to the binding list,
    matching the proof type numbering of the MASS chain.
    """

    DEFAULT = 0
    CHIA = 1

    @classmethod
    def from_selector(cls, selector: str) -> PlotFormat:
        """Map a CLI selector (``m1`` / ``m2``) to a format.

        Raises:
            ValueError: If the selector is not recognised.
        """
        try:
            return _SELECTORS[selector.strip().lower()]
        except KeyError:
            raise ValueError(
                f"invalid plot type '{selector}', should be m1 (for native MassDB) "
                "or m2 (for Chia Plot)"
            ) from None

    @property
    def selector(self) -> str:
        return "m1" if self is PlotFormat.DEFAULT else "m2"

    @property
    def label(self) -> str:
        """Human-readable name used in log messages."""
        return "native MassDB" if self is PlotFormat.DEFAULT else "chia plot"


_SELECTORS: dict[str, PlotFormat] = {
    "m1": PlotFormat.DEFAULT,
    "m2": PlotFormat.CHIA,
}


@dataclass(frozen=True)
class BindingPlot:
    """A binding target derived from a single plot file.

    Attributes:
        target: Deterministic binding target bytes (deduplication key).
        format: Proof type of the source plot.
        size: Bit length (native) or k (Chia) of the source plot.
    """

    target: bytes
    format: PlotFormat
    size: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target.hex(),
            "type": int(self.format),
            "size": self.size,
        }


@dataclass(frozen=True)
class BindingList:
    """Deduplicated binding list for one invocation.

    ``total_count`` always equals ``len(plots)``. ``default_count`` and
    ``chia_count`` are the per-format tallies taken before deduplication.
    """

    plots: tuple[BindingPlot, ...] = ()
    total_count: int = 0
    default_count: int = 0
    chia_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "plots": [plot.to_dict() for plot in self.plots],
            "total_count": self.total_count,
            "default_count": self.default_count,
            "chia_count": self.chia_count,
        }


@dataclass(frozen=True)
class ScanConfig:
    """Immutable parameters for one binding-list scan.

    Attributes:
        plot_format: The single format searched for in this run.
        directories: Search directories, resolved to absolute paths.
        list_all: Include native plots that are not fully plotted.
        keystore: Optional ownership checker; Chia plots whose pool or
            farmer key is not owned are excluded.
    """

    plot_format: PlotFormat
    directories: tuple[Path, ...] = ()
    list_all: bool = False
    keystore: OwnershipChecker | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        plot_format: PlotFormat,
        directories: list[str | Path] | tuple[str | Path, ...] = (),
        list_all: bool = False,
        keystore: OwnershipChecker | None = None,
    ) -> ScanConfig:
        """Build a config, resolving every directory to an absolute path."""
        resolved = tuple(Path(d).expanduser().absolute() for d in directories)
        return cls(
            plot_format=plot_format,
            directories=resolved,
            list_all=list_all,
            keystore=keystore,
        )


@dataclass
class DirectoryReport:
    """Counters collected while scanning one directory."""

    directory: Path
    plot_format: PlotFormat
    matched: int = 0
    included: int = 0
    excluded: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "dir": str(self.directory),
            "type": self.plot_format.selector,
            "matched": self.matched,
            "included": self.included,
            "excluded": self.excluded,
            "skipped": self.skipped,
        }
