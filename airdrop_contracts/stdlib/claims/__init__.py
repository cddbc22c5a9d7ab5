# -*- coding: utf-8 -*-
"""
airdrop_contracts.stdlib.claims
===============================

Claim ledgers: monotonic per-index "already claimed" flags.

Two interchangeable layouts implement the same :class:`ClaimLedger` surface:

- :class:`~.mapping.MappingClaimLedger`: one storage slot per index.
- :class:`~.bitmap.BitmapClaimLedger`: one 256-bit word per ``index // 256``;
  bit ``index % 256`` is the flag.

The choice is a deployment decision (storage cost), not a runtime switch.
Each ledger owns a storage prefix so a contract can hold several side by side.
Marking is irreversible: there is no reset.
"""

from __future__ import annotations

from typing import Final, Protocol, runtime_checkable

from airdrop_vm.stdlib import abi

WORD_BITS: Final[int] = 256
MAX_INDEX: Final[int] = (1 << 256) - 1

ERR_BAD_INDEX: Final[bytes] = b"bad index"


@runtime_checkable
class ClaimLedger(Protocol):
    def is_claimed(self, index: int) -> bool: ...
    def mark_claimed(self, index: int) -> None: ...


def require_index(index: int) -> None:
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index <= MAX_INDEX:
        abi.revert(ERR_BAD_INDEX)


def slot_key(prefix: bytes, n: int) -> bytes:
    return prefix + n.to_bytes(32, "big")


from .bitmap import BitmapClaimLedger, word_position  # noqa: E402
from .mapping import MappingClaimLedger  # noqa: E402

__all__ = [
    "WORD_BITS",
    "ClaimLedger",
    "MappingClaimLedger",
    "BitmapClaimLedger",
    "word_position",
    "require_index",
]
