"""
airdrop_vm.runtime.hash_api: deterministic hashing wrappers for the runtime.

Goals
-----
- Strictly bytes-in, bytes-out (no implicit text/encoding).
- Keccak-256 (pre-SHA3 padding) as used by EVM tooling, so leaves and
  commitments match what off-chain builders produce bit for bit.
- Optional domain separation prefix for host-internal identifiers.

Provided APIs
-------------
- keccak256(data: bytes, *, domain: bytes = b"") -> bytes
- sha3_256(data: bytes, *, domain: bytes = b"") -> bytes
- hash_concat_keccak256(*chunks: bytes, domain=b"") -> bytes

Domain Separation
-----------------
If a non-empty `domain` is provided, the hash input becomes:

    b"\\x19airdrop:" || domain || b"\\x00" || data

Contract-visible hashing (leaves, pair hashing, commitments) never uses a
domain; it is only for host-generated ids (addresses, tx hashes).
"""

from __future__ import annotations

import hashlib

from eth_utils import keccak as _keccak

from airdrop_vm.errors import VmError

_DOMAIN_PREFIX = b"\x19airdrop:"


def _ensure_bytes(buf: object, name: str) -> bytes:
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    raise VmError(f"{name} must be bytes-like (got {type(buf).__name__})")


def _apply_domain(h, domain: bytes) -> None:
    if domain:
        h.update(_DOMAIN_PREFIX)
        h.update(domain)
        h.update(b"\x00")


def _domain_prefix(domain: bytes) -> bytes:
    return _DOMAIN_PREFIX + domain + b"\x00" if domain else b""


# ------------------------------- Hash Functions ------------------------------ #


def keccak256(data: bytes | bytearray | memoryview, *, domain: bytes = b"") -> bytes:
    """Keccak-256 (pre-SHA3) as used by Ethereum tooling."""
    d = _ensure_bytes(data, "data")
    return _keccak(_domain_prefix(_ensure_bytes(domain, "domain")) + d)


def sha3_256(data: bytes | bytearray | memoryview, *, domain: bytes = b"") -> bytes:
    d = _ensure_bytes(data, "data")
    h = hashlib.sha3_256()
    _apply_domain(h, _ensure_bytes(domain, "domain"))
    h.update(d)
    return h.digest()


def hash_concat_keccak256(*chunks: bytes | bytearray | memoryview, domain: bytes = b"") -> bytes:
    parts = [_ensure_bytes(c, f"chunk[{i}]") for i, c in enumerate(chunks)]
    return _keccak(_domain_prefix(_ensure_bytes(domain, "domain")) + b"".join(parts))


def word_count(data: bytes) -> int:
    """Number of 32-byte words covering ``data`` (used for gas accounting)."""
    n = len(data)
    return (n + 31) // 32


__all__ = [
    "keccak256",
    "sha3_256",
    "hash_concat_keccak256",
    "word_count",
]
