# -*- coding: utf-8 -*-
"""
State shared by every airdrop contract: the one-time initializer and the
immutable Merkle root.
"""

from __future__ import annotations

from typing import Final

from airdrop_vm.stdlib import abi, events, storage

K_INIT: Final[bytes] = b"drop:init"
K_ROOT: Final[bytes] = b"drop:root"

EVT_INITIALIZED: Final[bytes] = b"Initialized"

ERR_ALREADY_INITIALIZED: Final[bytes] = b"already initialized"
ERR_NOT_INITIALIZED: Final[bytes] = b"not initialized"
ERR_BAD_ROOT: Final[bytes] = b"bad root"

_ZERO_ROOT: Final[bytes] = b"\x00" * 32


def initialize(root: bytes) -> None:
    """Record ``root`` exactly once."""
    if storage.exists(K_INIT):
        abi.revert(ERR_ALREADY_INITIALIZED)
    if not isinstance(root, (bytes, bytearray)) or len(root) != 32 or bytes(root) == _ZERO_ROOT:
        abi.revert(ERR_BAD_ROOT)
    storage.set(K_INIT, b"\x01")
    storage.set(K_ROOT, bytes(root))
    events.emit(EVT_INITIALIZED, {"root": bytes(root)})


def merkle_root() -> bytes:
    root = storage.get(K_ROOT)
    abi.require(root is not None, ERR_NOT_INITIALIZED)
    return root
