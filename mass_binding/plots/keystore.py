"""Keystore ownership lookups for Chia plots.

A Chia plot is only worth binding when the local wallet holds the
private keys behind both the pool public key and the farmer public key
recorded in its header. The scanner only needs a yes/no capability
lookup, expressed by the ``OwnershipChecker`` protocol; ``Keystore`` is
the file-backed implementation.

Keystore files are YAML (JSON is accepted as a YAML subset)::

    keys:
      - pool_public_key: <96 hex chars>
        pool_private_key: <64 hex chars>
        farmer_public_key: <96 hex chars>
        farmer_private_key: <64 hex chars>

A public key only counts as owned when its entry also carries a private
key. The private key is only checked for length: nothing verifies that it
actually derives the listed public key, so the ownership filter trusts
the keystore file as written.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml
from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Keystore",
    "KeystoreEntry",
    "KeystoreError",
    "KeystoreFile",
    "OwnershipChecker",
    "load_keystore",
]

PUBLIC_KEY_SIZE = 48
PRIVATE_KEY_SIZE = 32


class KeystoreError(Exception):
    """Raised when a keystore file cannot be read or validated."""


@runtime_checkable
class OwnershipChecker(Protocol):
    """Capability lookup answering whether private keys are held locally."""

    def has_pool_key(self, public_key: bytes) -> bool:
        """True if the private key for this pool public key is held."""
        ...

    def has_farmer_key(self, public_key: bytes) -> bool:
        """True if the private key for this farmer public key is held."""
        ...


# ============================================================================
# Pydantic models for the keystore file
# ============================================================================


def _parse_hex(value: object, size: int, label: str) -> bytes | None:
    if value is None or value == "":
        return None
    if isinstance(value, bytes):
        raw = value
    else:
        text = str(value).strip()
        if text.lower().startswith("0x"):
            text = text[2:]
        try:
            raw = bytes.fromhex(text)
        except ValueError as exc:
            raise ValueError(f"{label} is not valid hex") from exc
    if len(raw) != size:
        raise ValueError(f"{label} must be {size} bytes, got {len(raw)}")
    return raw


class KeystoreEntry(BaseModel):
    """One pool/farmer key set from the keystore file."""

    pool_public_key: bytes | None = None
    pool_private_key: bytes | None = None
    farmer_public_key: bytes | None = None
    farmer_private_key: bytes | None = None

    @field_validator("pool_public_key", "farmer_public_key", mode="before")
    @classmethod
    def _public_key(cls, value: object, info: ValidationInfo) -> bytes | None:
        return _parse_hex(value, PUBLIC_KEY_SIZE, info.field_name)

    @field_validator("pool_private_key", "farmer_private_key", mode="before")
    @classmethod
    def _private_key(cls, value: object, info: ValidationInfo) -> bytes | None:
        return _parse_hex(value, PRIVATE_KEY_SIZE, info.field_name)


class KeystoreFile(BaseModel):
    """Top-level keystore document."""

    keys: list[KeystoreEntry] = Field(default_factory=list)


# ============================================================================
# Keystore
# ============================================================================


class Keystore:
    """In-memory set of public keys whose private keys are held.

    Args:
        pool_keys: Pool public keys with a known private key.
        farmer_keys: Farmer public keys with a known private key.
    """

    def __init__(
        self,
        pool_keys: Iterable[bytes] = (),
        farmer_keys: Iterable[bytes] = (),
    ) -> None:
        self._pool_keys = frozenset(bytes(k) for k in pool_keys)
        self._farmer_keys = frozenset(bytes(k) for k in farmer_keys)

    @classmethod
    def from_model(cls, document: KeystoreFile) -> Keystore:
        pool_keys = [
            entry.pool_public_key
            for entry in document.keys
            if entry.pool_public_key is not None and entry.pool_private_key
        ]
        farmer_keys = [
            entry.farmer_public_key
            for entry in document.keys
            if entry.farmer_public_key is not None and entry.farmer_private_key
        ]
        return cls(pool_keys=pool_keys, farmer_keys=farmer_keys)

    def has_pool_key(self, public_key: bytes) -> bool:
        return bytes(public_key) in self._pool_keys

    def has_farmer_key(self, public_key: bytes) -> bool:
        return bytes(public_key) in self._farmer_keys

    def __len__(self) -> int:
        return len(self._pool_keys) + len(self._farmer_keys)

    def __repr__(self) -> str:
        return (
            f"Keystore(pool_keys={len(self._pool_keys)}, "
            f"farmer_keys={len(self._farmer_keys)})"
        )


def load_keystore(path: Path | str) -> Keystore:
    """Load and validate a keystore file.

    Raises:
        KeystoreError: If the file is missing, unreadable or invalid.
    """
    path = Path(path).expanduser()
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise KeystoreError(f"cannot read keystore {path}: {exc}") from exc
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise KeystoreError(f"cannot parse keystore {path}: {exc}") from exc

    try:
        document = KeystoreFile.model_validate(raw)
    except ValidationError as exc:
        raise KeystoreError(f"invalid keystore {path}: {exc}") from exc

    keystore = Keystore.from_model(document)
    logger.info(
        "Loaded keystore %s (%d entries, %r)", path, len(document.keys), keystore
    )
    return keystore
