"""Deterministic binding-target derivation.

A binding target identifies a plot to the chain without exposing any
private key material. Derivation is a pure function of the plot's
public identity and size:

    native MassDB:  SHA256(b"massdb" | compressed public key | bit length)
    chia plot:      SHA256(b"chia" | plot id | k)

The domain prefixes keep a native and a Chia plot from ever sharing a
target. A derivation failure means the inputs violate the chain's
parameter rules, which the scanner treats as fatal rather than skipping
the file.
"""

from __future__ import annotations

import hashlib

from mass_binding.plots.headers import (
    CHIA_PLOT_ID_SIZE,
    ChiaPlotInfo,
    HeaderInfo,
    MassDBInfoV1,
    is_compressed_secp256k1,
)
from mass_binding.settings import get_allow_test_plots

__all__ = [
    "CHIA_K_RANGE",
    "CHIA_TEST_K_MIN",
    "MASSDB_BIT_LENGTHS",
    "TargetDerivationError",
    "derive_chia_target",
    "derive_massdb_target",
    "derive_target",
]

# Bit lengths accepted by the MASS consensus rules
MASSDB_BIT_LENGTHS = frozenset(range(24, 42, 2))

CHIA_K_RANGE = range(32, 51)
CHIA_TEST_K_MIN = 18

_MASSDB_DOMAIN = b"massdb"
_CHIA_DOMAIN = b"chia"


class TargetDerivationError(Exception):
    """Raised when a binding target cannot be derived from plot metadata."""


def derive_massdb_target(public_key: bytes, bit_length: int) -> bytes:
    """Derive the binding target of a native MassDB plot.

    Args:
        public_key: 33-byte compressed secp256k1 public key.
        bit_length: Plot bit length; must be a consensus-valid value.

    Returns:
        32-byte binding target.

    Raises:
        TargetDerivationError: On an invalid key or bit length.
    """
    if bit_length not in MASSDB_BIT_LENGTHS:
        raise TargetDerivationError(
            f"invalid bit length {bit_length}, "
            f"expected one of {sorted(MASSDB_BIT_LENGTHS)}"
        )
    if not is_compressed_secp256k1(public_key):
        raise TargetDerivationError("invalid compressed secp256k1 public key")
    payload = _MASSDB_DOMAIN + public_key + bytes([bit_length])
    return hashlib.sha256(payload).digest()


def derive_chia_target(
    plot_id: bytes, k: int, *, allow_test_plots: bool | None = None
) -> bytes:
    """Derive the binding target of a Chia plot.

    Args:
        plot_id: 32-byte plot id.
        k: Plot size parameter.
        allow_test_plots: Accept k below 32. Defaults to the
            ``allow-test-plots`` setting.

    Returns:
        32-byte binding target.

    Raises:
        TargetDerivationError: On an invalid plot id or k.
    """
    if allow_test_plots is None:
        allow_test_plots = get_allow_test_plots()
    if len(plot_id) != CHIA_PLOT_ID_SIZE:
        raise TargetDerivationError(
            f"invalid plot id length {len(plot_id)}, expected {CHIA_PLOT_ID_SIZE}"
        )
    k_min = CHIA_TEST_K_MIN if allow_test_plots else CHIA_K_RANGE.start
    if not k_min <= k < CHIA_K_RANGE.stop:
        raise TargetDerivationError(
            f"invalid k {k}, expected {k_min}..{CHIA_K_RANGE.stop - 1}"
        )
    payload = _CHIA_DOMAIN + plot_id + bytes([k])
    return hashlib.sha256(payload).digest()


def derive_target(info: HeaderInfo) -> bytes:
    """Derive the binding target for any parsed plot header."""
    if isinstance(info, MassDBInfoV1):
        return derive_massdb_target(info.public_key, info.bit_length)
    if isinstance(info, ChiaPlotInfo):
        return derive_chia_target(info.plot_id, info.k)
    raise TypeError(f"unsupported header type: {type(info).__name__}")
