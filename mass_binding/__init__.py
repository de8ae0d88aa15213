"""mass-binding: offline binding target lists for MASS plot files."""

__version__ = "0.3.0"
