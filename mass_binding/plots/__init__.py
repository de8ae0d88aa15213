"""Plot discovery and binding list aggregation.

Searches local directories for MASS plot files, derives a binding target
for each and produces a deduplicated binding list ready for export.

Pipeline:
    collect --type m1|m2 --dirs ...
      1. CLASSIFY: match directory entries against the format's filename pattern
      2. EXTRACT: parse the header, apply plotted / ownership rules
      3. DERIVE: compute the deterministic binding target
      4. AGGREGATE: merge directories, drop duplicate targets, count

Supported formats:
- m1: native MassDB v1 files (``<ordinal>_<pubkey>_<bitlength>.massdb``)
- m2: Chia plots (``plot-k32-....plot``), optionally filtered by keystore
"""

from .cancellation import CancellationToken, ScanCancelled, handle_interrupts
from .collect import CollectResult, collect, collect_binding_list
from .keystore import Keystore, KeystoreError, OwnershipChecker, load_keystore
from .models import BindingList, BindingPlot, DirectoryReport, PlotFormat, ScanConfig
from .report import ReportWriteError, check_output_path, write_binding_list
from .targets import TargetDerivationError
from .walker import DirectoryScanError

__all__ = [
    "BindingList",
    "BindingPlot",
    "CancellationToken",
    "CollectResult",
    "DirectoryReport",
    "DirectoryScanError",
    "Keystore",
    "KeystoreError",
    "OwnershipChecker",
    "PlotFormat",
    "ReportWriteError",
    "ScanCancelled",
    "ScanConfig",
    "TargetDerivationError",
    "check_output_path",
    "collect",
    "collect_binding_list",
    "handle_interrupts",
    "load_keystore",
    "write_binding_list",
]
