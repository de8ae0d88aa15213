"""Project settings loaded from pyproject.toml [tool.mass-binding] section.

Settings:
  [tool.mass-binding]
    log-dir          : directory for rotating CLI log files
    default-type     : plot type used when ``--type`` is omitted (m1 / m2)
    allow-test-plots : accept small-k Chia plots (k < 32) when deriving targets

Environment only:
    MASS_BINDING_RICH: force summary tables on or off

All settings support environment variable overrides (MASS_BINDING_* prefix).
"""

import os
import tomllib
from functools import cache
from pathlib import Path


@cache
def _load_pyproject_settings() -> dict:
    """Load settings from pyproject.toml [tool.mass-binding] section.

    Walks up from the package directory so development checkouts pick up
    the repository pyproject.toml.

    Returns:
        Dictionary of settings from pyproject.toml, empty dict if not found.
    """
    current = Path(__file__).resolve().parent
    while current != current.parent:
        candidate = current / "pyproject.toml"
        if candidate.exists():
            break
        current = current.parent
    else:
        return {}

    try:
        data = tomllib.loads(candidate.read_text())
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return data.get("tool", {}).get("mass-binding", {})


def _parse_bool(value: str | bool) -> bool:
    """Parse a boolean value from string or bool."""
    if isinstance(value, bool):
        return value
    return value.lower() in ("true", "1", "yes")


# ─── Logging ───────────────────────────────────────────────────────────────

DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "mass-binding" / "logs"


def get_log_dir() -> Path:
    """Get the directory for CLI log files.

    Priority: MASS_BINDING_LOG_DIR env → [tool.mass-binding].log-dir
              → ~/.local/share/mass-binding/logs.
    """
    if env := os.getenv("MASS_BINDING_LOG_DIR"):
        return Path(env).expanduser()
    if value := _load_pyproject_settings().get("log-dir"):
        return Path(str(value)).expanduser()
    return DEFAULT_LOG_DIR


def get_rich_override() -> bool | None:
    """Get the explicit rich-output switch.

    MASS_BINDING_RICH=1/true/yes forces tables on, 0/false/no forces them
    off. Unset or any other value returns None (auto-detect).
    """
    value = os.getenv("MASS_BINDING_RICH", "").strip().lower()
    if value in ("1", "true", "yes"):
        return True
    if value in ("0", "false", "no"):
        return False
    return None


# ─── Scanning ──────────────────────────────────────────────────────────────


def get_default_plot_type() -> str | None:
    """Get the plot type selector used when ``--type`` is not given.

    Priority: MASS_BINDING_TYPE env → [tool.mass-binding].default-type → None.
    A ``None`` result means the CLI must be told the type explicitly.
    """
    if env := os.getenv("MASS_BINDING_TYPE"):
        return env.lower()
    value = _load_pyproject_settings().get("default-type")
    return str(value).lower() if value else None


def get_allow_test_plots() -> bool:
    """Get whether small-k Chia test plots may be bound.

    Priority: MASS_BINDING_ALLOW_TEST_PLOTS env
              → [tool.mass-binding].allow-test-plots → False.
    """
    if env := os.getenv("MASS_BINDING_ALLOW_TEST_PLOTS"):
        return _parse_bool(env)
    val = _load_pyproject_settings().get("allow-test-plots")
    if val is not None:
        return _parse_bool(val)
    return False
