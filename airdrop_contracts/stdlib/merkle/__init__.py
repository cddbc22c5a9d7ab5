# -*- coding: utf-8 -*-
"""
airdrop_contracts.stdlib.merkle
===============================

Sorted-pair Keccak-256 Merkle inclusion proofs.

Leaf
----
    leaf = keccak256(address(20) || uint256_be(index, 32))

which is ``abi.encodePacked(address, uint256)`` hashed, so roots produced by
common EVM tooling verify here unchanged.

Folding
-------
Starting from the leaf, each sibling is combined as

    acc = keccak256(min(acc, sib) || max(acc, sib))

with a byte-wise comparison; proofs carry no direction bits. The proof is
valid iff the final accumulator equals the root exactly.

``verify`` never raises: malformed input (wrong lengths, wrong types) is
simply not a valid proof.
"""

from __future__ import annotations

from typing import Any, Final, Sequence

from airdrop_vm.stdlib import hash as _hash

HASH_LEN: Final[int] = 32
ADDRESS_LEN: Final[int] = 20
MAX_INDEX: Final[int] = (1 << 256) - 1


def _is_hash(x: Any) -> bool:
    return isinstance(x, (bytes, bytearray)) and len(x) == HASH_LEN


def leaf_for(address: bytes, index: int) -> bytes:
    """Leaf hash for the allowlist entry ``(address, index)``."""
    if not isinstance(address, (bytes, bytearray)) or len(address) != ADDRESS_LEN:
        raise ValueError("address must be 20 bytes")
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index <= MAX_INDEX:
        raise ValueError("index must be a uint256")
    return _hash.keccak256(bytes(address) + index.to_bytes(32, "big"))


def hash_pair(a: bytes, b: bytes) -> bytes:
    if a <= b:
        return _hash.keccak256(a + b)
    return _hash.keccak256(b + a)


def process_proof(leaf: bytes, proof: Sequence[bytes]) -> bytes:
    """Fold ``proof`` into ``leaf`` and return the computed root."""
    acc = bytes(leaf)
    for sib in proof:
        acc = hash_pair(acc, bytes(sib))
    return acc


def verify(leaf: bytes, proof: Sequence[bytes], root: bytes) -> bool:
    if not _is_hash(leaf) or not _is_hash(root):
        return False
    if isinstance(proof, (bytes, bytearray, str)) or not isinstance(proof, Sequence):
        return False
    if not all(_is_hash(p) for p in proof):
        return False
    return process_proof(leaf, proof) == bytes(root)


__all__ = ["HASH_LEN", "leaf_for", "hash_pair", "process_proof", "verify"]
