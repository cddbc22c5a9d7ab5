"""
Hashing for contracts: ``keccak256`` and ``sha3_256``.

Both charge ``keccak`` gas per 32-byte word of input before hashing and take
bytes-like input only.
"""

from __future__ import annotations

from typing import Callable, Union

from airdrop_vm.runtime import gasmeter, hash_api

BytesLike = Union[bytes, bytearray, memoryview]


def _metered(fn: Callable[[bytes], bytes], data: BytesLike) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"data must be bytes-like, got {type(data).__name__}")
    d = bytes(data)
    gasmeter.charge("keccak", hash_api.word_count(d))
    return fn(d)


def keccak256(data: BytesLike) -> bytes:
    """32-byte Keccak-256 digest (the Ethereum variant, not NIST SHA3)."""
    return _metered(hash_api.keccak256, data)


def sha3_256(data: BytesLike) -> bytes:
    return _metered(hash_api.sha3_256, data)


__all__ = ("keccak256", "sha3_256")
