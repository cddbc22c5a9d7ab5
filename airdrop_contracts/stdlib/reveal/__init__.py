# -*- coding: utf-8 -*-
"""
airdrop_contracts.stdlib.reveal
===============================

Per-claimant commit-reveal gate.

A claimant first commits ``keccak256(decimal_ascii(seed))``; at least
``MIN_DELAY`` blocks later they reveal ``seed``. The seed therefore cannot be
chosen after anything observable in the intervening blocks.

States
------
    NONE --commit--> COMMITTED --reveal--> REVEALED --commit--> COMMITTED

- ``commit`` requires NONE or REVEALED. A pending commitment reverts
  ``"commitment pending"``. An address holding several allowlist indices
  commits again after each reveal; the claim ledger stops any index from
  being redeemed twice.
- ``reveal`` requires COMMITTED (``"no commitment"`` otherwise), then
  ``height - recorded >= MIN_DELAY`` (``"reveal too early"``), then a matching
  seed (``"invalid seed"``). Success consumes the commitment.

Storage
-------
One record per claimant at ``K_COMMIT || address``:

    state(1) || recorded_height(8, big-endian) || hash(32)

After a successful reveal the hash field is zeroed.

Events
------
    b"Committed" { account, commitment, height }
    b"Revealed"  { account, seed }
"""

from __future__ import annotations

from typing import Final, Tuple

from airdrop_vm.runtime import hash_api
from airdrop_vm.stdlib import abi, events, hash, storage

MIN_DELAY: Final[int] = 10

STATE_NONE: Final[int] = 0
STATE_COMMITTED: Final[int] = 1
STATE_REVEALED: Final[int] = 2

K_COMMIT: Final[bytes] = b"reveal:commit:"

EVT_COMMITTED: Final[bytes] = b"Committed"
EVT_REVEALED: Final[bytes] = b"Revealed"

ERR_PENDING: Final[bytes] = b"commitment pending"
ERR_NO_COMMITMENT: Final[bytes] = b"no commitment"
ERR_TOO_EARLY: Final[bytes] = b"reveal too early"
ERR_INVALID_SEED: Final[bytes] = b"invalid seed"
ERR_BAD_COMMITMENT: Final[bytes] = b"bad commitment"
ERR_BAD_SEED: Final[bytes] = b"bad seed"

_ZERO_HASH: Final[bytes] = b"\x00" * 32
_RECORD_LEN: Final[int] = 1 + 8 + 32
_MAX_SEED: Final[int] = (1 << 256) - 1


# ------------------------------------------------------------------------------
# Record codec
# ------------------------------------------------------------------------------


def _key(account: bytes) -> bytes:
    return K_COMMIT + bytes(account)


def _load(account: bytes) -> Tuple[int, int, bytes]:
    raw = storage.get(_key(account))
    if raw is None:
        return STATE_NONE, 0, _ZERO_HASH
    if len(raw) != _RECORD_LEN:
        abi.revert(b"corrupt commitment record")
    return raw[0], int.from_bytes(raw[1:9], "big"), raw[9:]


def _store(account: bytes, state: int, height: int, commitment: bytes) -> None:
    storage.set(_key(account), bytes([state]) + height.to_bytes(8, "big") + commitment)


# ------------------------------------------------------------------------------
# Seed hashing
# ------------------------------------------------------------------------------


def _seed_bytes(seed: int) -> bytes:
    return str(seed).encode("ascii")


def commitment_for_seed(seed: int) -> bytes:
    """
    Off-chain helper: the commitment a claimant should submit for ``seed``.

    Matches ``keccak256(toUtf8Bytes(seed.toString()))`` from JS tooling.
    """
    if not isinstance(seed, int) or isinstance(seed, bool) or not 0 <= seed <= _MAX_SEED:
        raise ValueError("seed must be a uint256")
    return hash_api.keccak256(_seed_bytes(seed))


# ------------------------------------------------------------------------------
# Gate operations (explicit account + height)
# ------------------------------------------------------------------------------


def commit(account: bytes, commitment: bytes, height: int) -> None:
    abi.require(isinstance(commitment, (bytes, bytearray)) and len(commitment) == 32, ERR_BAD_COMMITMENT)
    state, _, _ = _load(account)
    if state == STATE_COMMITTED:
        abi.revert(ERR_PENDING)
    _store(account, STATE_COMMITTED, height, bytes(commitment))
    events.emit(EVT_COMMITTED, {"account": account, "commitment": bytes(commitment), "height": height})


def reveal(account: bytes, seed: int, height: int) -> None:
    state, recorded, stored = _load(account)
    if state != STATE_COMMITTED:
        abi.revert(ERR_NO_COMMITMENT)
    if height - recorded < MIN_DELAY:
        abi.revert(ERR_TOO_EARLY)
    abi.require(isinstance(seed, int) and not isinstance(seed, bool) and 0 <= seed <= _MAX_SEED, ERR_BAD_SEED)
    if hash.keccak256(_seed_bytes(seed)) != stored:
        abi.revert(ERR_INVALID_SEED)
    _store(account, STATE_REVEALED, recorded, _ZERO_HASH)
    events.emit(EVT_REVEALED, {"account": account, "seed": seed})


def commitment_of(account: bytes) -> Tuple[bytes, int, int]:
    """``(hash, recorded_height, state)``; all zeros when nothing was committed."""
    state, height, commitment = _load(account)
    return commitment, height, state


__all__ = [
    "MIN_DELAY",
    "STATE_NONE",
    "STATE_COMMITTED",
    "STATE_REVEALED",
    "commitment_for_seed",
    "commit",
    "reveal",
    "commitment_of",
]
