"""Test fixtures for plot discovery tests.

Builds native MassDB and Chia plot files on disk with real header layouts
so the scanner runs end to end against ``tmp_path``. Plot bodies are not
written; only the headers are ever read.

Fixtures:
- plot_factory: writes plot files and keystore documents into directories
- isolate_environment: keeps log files and settings overrides out of $HOME
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path

import pytest
import yaml

from mass_binding import settings
from mass_binding.plots.headers import CHIA_PLOT_MAGIC, MASSDB_V1_HEADER_SIZE

# =============================================================================
# Key material
# =============================================================================

# Compressed secp256k1 encodings of G, 2G and 3G
PUBKEY_G = bytes.fromhex(
    "0279BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798"
)
PUBKEY_2G = bytes.fromhex(
    "02C6047F9441ED7D6D3045406E95C07CD85C778E4B8CEF3CA7ABAC09B95C709EE5"
)
PUBKEY_3G = bytes.fromhex(
    "02F9308A019258C31049344F85F89D5229B531C845836F99B08601F113BCE036F9"
)

POOL_PK = bytes(range(48))
FARMER_PK = bytes(range(48, 96))
OTHER_PK = bytes(range(100, 148))
PUZZLE_HASH = bytes(range(200, 232))


# =============================================================================
# Header builders
# =============================================================================


def massdb_header(
    public_key: bytes = PUBKEY_G,
    bit_length: int = 32,
    checkpoint: int | None = None,
    version: bytes = b"MASSDB V1.0",
) -> bytes:
    """Native MassDB v1 header; fully plotted unless ``checkpoint`` is given."""
    if checkpoint is None:
        checkpoint = 1 << bit_length
    header = bytearray(MASSDB_V1_HEADER_SIZE)
    header[: len(version)] = version
    header[32] = bit_length
    struct.pack_into("<Q", header, 40, checkpoint)
    header[48 : 48 + len(public_key)] = public_key
    return bytes(header)


def massdb_filename(
    public_key: bytes = PUBKEY_G, bit_length: int = 32, ordinal: int = 1
) -> str:
    return f"{ordinal}_{public_key.hex()}_{bit_length:02d}.massdb"


def chia_header(
    plot_id: bytes,
    k: int = 32,
    pool_public_key: bytes | None = POOL_PK,
    farmer_public_key: bytes = FARMER_PK,
    puzzle_hash: bytes | None = None,
    format_description: bytes = b"v1.0",
) -> bytes:
    """Chia plot header bound to a pool key, or to ``puzzle_hash`` if given."""
    pool_part = puzzle_hash if puzzle_hash is not None else pool_public_key
    memo = pool_part + farmer_public_key + bytes(32)
    return (
        CHIA_PLOT_MAGIC
        + plot_id
        + bytes([k])
        + struct.pack(">H", len(format_description))
        + format_description
        + struct.pack(">H", len(memo))
        + memo
    )


def chia_filename(plot_id: bytes, k: int = 32) -> str:
    return f"plot-k{k}-2021-05-01-10-20-{plot_id.hex()}.plot"


def plot_id(seed: int) -> bytes:
    """Deterministic 32-byte plot id."""
    return bytes((seed + i) % 256 for i in range(32))


class PlotFactory:
    """Writes plot files into directories under a temporary root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def directory(self, name: str) -> Path:
        path = self.root / name
        path.mkdir(parents=True, exist_ok=True)
        return path

    def massdb(
        self,
        directory: Path,
        public_key: bytes = PUBKEY_G,
        bit_length: int = 32,
        ordinal: int = 1,
        **header_kwargs,
    ) -> Path:
        path = directory / massdb_filename(public_key, bit_length, ordinal)
        path.write_bytes(massdb_header(public_key, bit_length, **header_kwargs))
        return path

    def chia(
        self, directory: Path, seed: int = 1, k: int = 32, **header_kwargs
    ) -> Path:
        pid = plot_id(seed)
        path = directory / chia_filename(pid, k)
        path.write_bytes(chia_header(pid, k, **header_kwargs))
        return path

    def keystore(self, name: str = "keystore.yaml", entries=None) -> Path:
        if entries is None:
            entries = [
                {
                    "pool_public_key": POOL_PK.hex(),
                    "pool_private_key": "11" * 32,
                    "farmer_public_key": FARMER_PK.hex(),
                    "farmer_private_key": "22" * 32,
                }
            ]
        path = self.root / name
        path.write_text(yaml.safe_dump({"keys": entries}))
        return path


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def plot_factory(tmp_path) -> PlotFactory:
    return PlotFactory(tmp_path)


@pytest.fixture(autouse=True)
def isolate_environment(tmp_path, monkeypatch):
    """Send CLI logs to tmp_path and clear settings overrides."""
    monkeypatch.setenv("MASS_BINDING_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("MASS_BINDING_RICH", "0")
    monkeypatch.delenv("MASS_BINDING_TYPE", raising=False)
    monkeypatch.delenv("MASS_BINDING_ALLOW_TEST_PLOTS", raising=False)
    settings._load_pyproject_settings.cache_clear()
    yield

    # configure_cli_logging detaches the package logger from the root
    package_logger = logging.getLogger("mass_binding")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
