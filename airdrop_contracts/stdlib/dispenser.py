# -*- coding: utf-8 -*-
"""
Claim gate shared by every airdrop entry point.

    leaf = merkle.leaf_for(account, index)
    verify(leaf, proof, root)   else revert "invalid proof"
    ledger.is_claimed(index)    then revert "already claimed"
    ledger.mark_claimed(index)

The ledger is marked *before* the caller hands out the reward, so anything
the reward triggers (a receiver hook re-entering the contract) already sees
the index as claimed.
"""

from __future__ import annotations

from typing import Final, Sequence

from airdrop_vm.stdlib import abi, events

from . import merkle
from .claims import ClaimLedger

EVT_CLAIMED: Final[bytes] = b"Claimed"

ERR_INVALID_PROOF: Final[bytes] = b"invalid proof"
ERR_ALREADY_CLAIMED: Final[bytes] = b"already claimed"


def check_and_mark(ledger: ClaimLedger, root: bytes, account: bytes, index: int, proof: Sequence[bytes]) -> bytes:
    """Run the verify -> check -> mark sequence; returns the leaf."""
    leaf = merkle.leaf_for(account, index)
    if not merkle.verify(leaf, proof, root):
        abi.revert(ERR_INVALID_PROOF)
    if ledger.is_claimed(index):
        abi.revert(ERR_ALREADY_CLAIMED)
    ledger.mark_claimed(index)
    events.emit(EVT_CLAIMED, {"account": bytes(account), "index": index})
    return leaf


__all__ = ["EVT_CLAIMED", "ERR_INVALID_PROOF", "ERR_ALREADY_CLAIMED", "check_and_mark"]
