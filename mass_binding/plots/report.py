"""Binding list JSON serialization and atomic file output."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from mass_binding.plots.models import BindingList

logger = logging.getLogger(__name__)

__all__ = [
    "ReportWriteError",
    "check_output_path",
    "dumps_binding_list",
    "write_binding_list",
]


class ReportWriteError(Exception):
    """Raised when the binding list file cannot be written."""


def check_output_path(path: Path | str, overwrite: bool = False) -> Path:
    """Resolve and validate the export path before any scanning starts.

    Returns:
        The absolute export path.

    Raises:
        ReportWriteError: If the path is a directory, or exists and
            ``overwrite`` is False.
    """
    resolved = Path(path).expanduser().absolute()
    if resolved.is_dir():
        raise ReportWriteError(f"filename is a directory: {resolved}")
    if resolved.exists() and not overwrite:
        raise ReportWriteError(
            f"cannot overwrite existing file {resolved}, try again with --overwrite"
        )
    return resolved


def dumps_binding_list(binding_list: BindingList) -> str:
    """Serialize a binding list as human-indented JSON."""
    return json.dumps(binding_list.to_dict(), indent=2)


def write_binding_list(path: Path | str, binding_list: BindingList) -> int:
    """Atomically write ``binding_list`` to ``path``.

    The JSON is written to a temporary file in the target directory and
    renamed over the destination, so readers never see a partial file.
    The file is created with mode 0666 filtered by the process umask.

    Returns:
        Number of bytes written.

    Raises:
        ReportWriteError: If the file cannot be written.
    """
    path = Path(path)
    data = dumps_binding_list(binding_list).encode("utf-8")
    tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    try:
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        logger.error(
            "Failed to write binding list file %s (total_count=%d, byte_size=%d)",
            path,
            binding_list.total_count,
            len(data),
        )
        raise ReportWriteError(f"cannot write {path}: {exc}") from exc

    logger.info(
        "Wrote %d plots (%d bytes) to %s", binding_list.total_count, len(data), path
    )
    return len(data)
