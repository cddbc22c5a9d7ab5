"""
Contract-facing key/value storage.

Keys and values are bytes. The executing contract's address is implicit: the
host installs a storage view scoped to it before the contract runs.

Gas
---
- get / exists:  sload
- set:           sstore_set when the slot was empty, sstore_reset otherwise
- delete:        sstore_reset

The existence probe inside ``set`` is not charged separately.
"""

from __future__ import annotations

from typing import Optional

from airdrop_vm.runtime import gasmeter
from airdrop_vm.runtime import storage_api as _rt

U256_MAX = (1 << 256) - 1


def _ensure_bytes(name: str, value: object) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"{name} must be bytes, got {type(value).__name__}")
    return bytes(value)


def get(key: bytes, default: Optional[bytes] = None) -> Optional[bytes]:
    """
    Get the value stored at 'key'; ``default`` when the slot is empty.
    """
    bkey = _ensure_bytes("key", key)
    gasmeter.charge("sload")
    v = _rt.get(bkey)
    return default if v is None else v


def exists(key: bytes) -> bool:
    bkey = _ensure_bytes("key", key)
    gasmeter.charge("sload")
    return _rt.exists(bkey)


def set(key: bytes, value: bytes) -> None:  # noqa: A001
    """Store 'value' at 'key' deterministically."""
    bkey = _ensure_bytes("key", key)
    bval = _ensure_bytes("value", value)
    fresh = not _rt.exists(bkey)
    gasmeter.charge("sstore_set" if fresh else "sstore_reset")
    _rt.set(bkey, bval)


def delete(key: bytes) -> None:
    """Delete 'key' if present (no-op if absent)."""
    bkey = _ensure_bytes("key", key)
    gasmeter.charge("sstore_reset")
    _rt.delete(bkey)


# --- fixed-width integer helpers ---------------------------------------------


def get_u256(key: bytes) -> int:
    """Read a 32-byte big-endian word; an empty slot reads as 0."""
    raw = get(key)
    if raw is None:
        return 0
    return int.from_bytes(raw, "big")


def set_u256(key: bytes, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("u256 value must be int")
    if value < 0 or value > U256_MAX:
        raise ValueError("u256 value out of range")
    set(key, value.to_bytes(32, "big"))


__all__ = ["get", "exists", "set", "delete", "get_u256", "set_u256", "U256_MAX"]
