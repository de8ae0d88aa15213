"""CLI logging configuration with file output.

Provides a shared ``configure_cli_logging`` function that sets up both
console and file logging for CLI commands. Log files are split by CLI
command under ``~/.local/share/mass-binding/logs/`` (or the directory
given by ``MASS_BINDING_LOG_DIR``).

Usage from any CLI command::

    from mass_binding.cli.logging import configure_cli_logging

    configure_cli_logging("collect", verbose=verbose)
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from mass_binding.settings import get_log_dir

ROOT_LOGGER = "mass_binding"


def get_log_file(command: str) -> Path:
    """Return the log file path for a CLI command, creating its directory."""
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"{command}.log"


def configure_cli_logging(
    command: str,
    *,
    verbose: bool = False,
    console_level: int | None = None,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 3,
) -> Path | None:
    """Configure logging for a CLI command with file output.

    Sets up:
    - File handler: DEBUG-level rotating log at ``<log dir>/<command>.log``
    - Console handler on stderr: WARNING (INFO if verbose)

    Args:
        command: CLI command name (e.g., "collect", "inspect")
        verbose: If True, set console to INFO level
        console_level: Override console level (takes precedence over verbose)
        file_level: File log level (default: DEBUG)
        max_bytes: Max size per log file before rotation
        backup_count: Number of rotated backups to keep

    Returns:
        Path to the log file, or None if the log directory is not writable.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)

    # Remove handlers from earlier calls to avoid duplicate output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if console_level is None:
        console_level = logging.INFO if verbose else logging.WARNING
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
        )
    )
    root_logger.addHandler(console_handler)

    log_file: Path | None
    try:
        log_file = get_log_file(command)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as exc:
        root_logger.warning("File logging disabled: %s", exc)
        log_file = None
    else:
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    # NOTSET would defer to the root logger's WARNING threshold
    root_logger.setLevel(min(file_level, console_level))
    root_logger.propagate = False
    return log_file
