"""Binary header parsers for native MassDB and Chia plot files.

Only the fixed-size header at the start of each file is read; plot
bodies are never touched. Each parser opens the file, reads the header
and closes it before returning, so no handle outlives one call.

Native MassDB v1 header (little-endian, 4096 bytes reserved)::

    offset  size  field
    0       32    program version, ASCII, NUL padded, starts with "MASSDB"
    32      1     bit length
    33      7     reserved
    40      8     checkpoint (uint64): hashes written so far
    48      33    compressed secp256k1 public key

    A plot is complete when checkpoint >= 2 ** bit_length.

Chia plot header (big-endian)::

    19    magic "Proof of Space Plot"
    32    plot id
    1     k
    2+n   format description (uint16 length prefix)
    2+m   memo (uint16 length prefix), one of:
            128 = pool public key (48) | farmer public key (48) | master sk (32)
            112 = pool contract puzzle hash (32) | farmer public key (48)
                  | master sk (32)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from mass_binding.plots.models import PlotFormat

__all__ = [
    "ChiaPlotInfo",
    "HeaderInfo",
    "HeaderParseError",
    "MassDBInfoV1",
    "is_compressed_secp256k1",
    "parse_chia_plot",
    "parse_header",
    "parse_massdb_v1",
]


class HeaderParseError(Exception):
    """Raised when a plot file header cannot be read or is malformed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


# =============================================================================
# Native MassDB v1
# =============================================================================

MASSDB_V1_HEADER_SIZE = 4096
MASSDB_VERSION_PREFIX = b"MASSDB"

_POS_VERSION = 0
_POS_BIT_LENGTH = 32
_POS_CHECKPOINT = 40
_POS_PUBKEY = 48
_PUBKEY_SIZE = 33

# secp256k1 field prime
_SECP256K1_P = 2**256 - 2**32 - 977


@dataclass(frozen=True)
class MassDBInfoV1:
    """Header metadata of a native MassDB v1 plot."""

    path: Path
    version: str
    public_key: bytes
    bit_length: int
    checkpoint: int

    @property
    def plotted(self) -> bool:
        """True once every hash of the plot has been written."""
        return self.checkpoint >= (1 << self.bit_length)


def is_compressed_secp256k1(data: bytes) -> bool:
    """Check that ``data`` is a compressed secp256k1 point encoding.

    Verifies the prefix byte and that x lies on the curve y^2 = x^3 + 7.
    """
    if len(data) != _PUBKEY_SIZE or data[0] not in (0x02, 0x03):
        return False
    x = int.from_bytes(data[1:], "big")
    if x >= _SECP256K1_P:
        return False
    rhs = (pow(x, 3, _SECP256K1_P) + 7) % _SECP256K1_P
    return pow(rhs, (_SECP256K1_P - 1) // 2, _SECP256K1_P) == 1


def parse_massdb_v1(path: Path | str) -> MassDBInfoV1:
    """Read the header of a native MassDB v1 file.

    Raises:
        HeaderParseError: If the file cannot be read or the header is invalid.
    """
    path = Path(path)
    try:
        with path.open("rb") as fh:
            header = fh.read(MASSDB_V1_HEADER_SIZE)
    except OSError as exc:
        raise HeaderParseError(path, f"cannot read file: {exc}") from exc

    if len(header) < MASSDB_V1_HEADER_SIZE:
        raise HeaderParseError(
            path, f"truncated header ({len(header)} < {MASSDB_V1_HEADER_SIZE} bytes)"
        )

    raw_version = header[_POS_VERSION:_POS_BIT_LENGTH].rstrip(b"\x00")
    if not raw_version.startswith(MASSDB_VERSION_PREFIX):
        raise HeaderParseError(path, "not a MassDB file (bad program version)")
    try:
        version = raw_version.decode("ascii")
    except UnicodeDecodeError as exc:
        raise HeaderParseError(path, "program version is not ASCII") from exc

    bit_length = header[_POS_BIT_LENGTH]
    (checkpoint,) = struct.unpack_from("<Q", header, _POS_CHECKPOINT)
    public_key = bytes(header[_POS_PUBKEY : _POS_PUBKEY + _PUBKEY_SIZE])
    if not is_compressed_secp256k1(public_key):
        raise HeaderParseError(path, "invalid public key")

    return MassDBInfoV1(
        path=path,
        version=version,
        public_key=public_key,
        bit_length=bit_length,
        checkpoint=checkpoint,
    )


# =============================================================================
# Chia plot
# =============================================================================

CHIA_PLOT_MAGIC = b"Proof of Space Plot"
CHIA_PLOT_ID_SIZE = 32
CHIA_G1_SIZE = 48
CHIA_PUZZLE_HASH_SIZE = 32
CHIA_MASTER_SK_SIZE = 32

_MEMO_WITH_POOL_KEY = CHIA_G1_SIZE + CHIA_G1_SIZE + CHIA_MASTER_SK_SIZE
_MEMO_WITH_CONTRACT = CHIA_PUZZLE_HASH_SIZE + CHIA_G1_SIZE + CHIA_MASTER_SK_SIZE


@dataclass(frozen=True)
class ChiaPlotInfo:
    """Header metadata of a Chia plot.

    Exactly one of ``pool_public_key`` and ``pool_contract_puzzle_hash``
    is set, depending on whether the plot is bound to a pool key or to a
    pool contract.
    """

    path: Path
    plot_id: bytes
    k: int
    format_description: str
    farmer_public_key: bytes
    pool_public_key: bytes | None = None
    pool_contract_puzzle_hash: bytes | None = None


def _read_exact(fh: BinaryIO, size: int, path: Path, what: str) -> bytes:
    data = fh.read(size)
    if len(data) != size:
        raise HeaderParseError(path, f"truncated header while reading {what}")
    return data


def _read_prefixed(fh: BinaryIO, path: Path, what: str) -> bytes:
    (length,) = struct.unpack(">H", _read_exact(fh, 2, path, f"{what} length"))
    return _read_exact(fh, length, path, what)


def parse_chia_plot(path: Path | str) -> ChiaPlotInfo:
    """Read the header of a Chia plot file.

    Raises:
        HeaderParseError: If the file cannot be read or the header is invalid.
    """
    path = Path(path)
    try:
        with path.open("rb") as fh:
            magic = _read_exact(fh, len(CHIA_PLOT_MAGIC), path, "magic")
            if magic != CHIA_PLOT_MAGIC:
                raise HeaderParseError(path, "not a chia plot (bad magic)")
            plot_id = _read_exact(fh, CHIA_PLOT_ID_SIZE, path, "plot id")
            k = _read_exact(fh, 1, path, "k")[0]
            raw_format = _read_prefixed(fh, path, "format description")
            memo = _read_prefixed(fh, path, "memo")
    except OSError as exc:
        raise HeaderParseError(path, f"cannot read file: {exc}") from exc

    try:
        format_description = raw_format.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HeaderParseError(path, "format description is not UTF-8") from exc

    if len(memo) == _MEMO_WITH_POOL_KEY:
        pool_public_key: bytes | None = memo[:CHIA_G1_SIZE]
        pool_contract_puzzle_hash: bytes | None = None
        farmer_public_key = memo[CHIA_G1_SIZE : 2 * CHIA_G1_SIZE]
    elif len(memo) == _MEMO_WITH_CONTRACT:
        pool_public_key = None
        pool_contract_puzzle_hash = memo[:CHIA_PUZZLE_HASH_SIZE]
        farmer_public_key = memo[
            CHIA_PUZZLE_HASH_SIZE : CHIA_PUZZLE_HASH_SIZE + CHIA_G1_SIZE
        ]
    else:
        raise HeaderParseError(path, f"unexpected memo length {len(memo)}")

    return ChiaPlotInfo(
        path=path,
        plot_id=plot_id,
        k=k,
        format_description=format_description,
        farmer_public_key=farmer_public_key,
        pool_public_key=pool_public_key,
        pool_contract_puzzle_hash=pool_contract_puzzle_hash,
    )


# =============================================================================
# Dispatch
# =============================================================================

HeaderInfo = MassDBInfoV1 | ChiaPlotInfo


def parse_header(path: Path | str, plot_format: PlotFormat) -> HeaderInfo:
    """Parse the header of ``path`` as a plot of ``plot_format``."""
    if plot_format is PlotFormat.DEFAULT:
        return parse_massdb_v1(path)
    return parse_chia_plot(path)
