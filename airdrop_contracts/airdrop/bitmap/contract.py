# -*- coding: utf-8 -*-
"""
Merkle airdrop (bitmap ledger)
------------------------------

Each allowlisted ``(address, index)`` may claim ``claim_amount`` tokens once.
Claim flags are packed 256 to a storage word, so claims sharing a word
only pay for a word update.

Views:
  - is_claimed(index: int) -> bool
  - merkle_root() -> bytes
  - claim_amount() -> int
  - balance_of(owner: bytes) -> int
  - total_supply() -> int
State-changing:
  - init(root: bytes, claim_amount: int = DEFAULT_CLAIM_AMOUNT) -> None
  - claim(proof: list[bytes], index: int) -> bool
  - transfer(to: bytes, amount: int) -> bool

Reverts: "already initialized", "bad root", "invalid proof", "already claimed".
"""
from __future__ import annotations

from typing import List

from airdrop_vm.stdlib import env

from airdrop_contracts.airdrop import common, fungible_drop
from airdrop_contracts.stdlib.claims import BitmapClaimLedger
from airdrop_contracts.stdlib.token import fungible

DEFAULT_CLAIM_AMOUNT = fungible_drop.DEFAULT_CLAIM_AMOUNT

LEDGER = BitmapClaimLedger(b"drop:bitmap:")

ABI = {
    "init": ("bytes32", "uint256"),
    "claim": ("bytes32[]", "uint256"),
    "is_claimed": ("uint256",),
    "merkle_root": (),
    "claim_amount": (),
    "balance_of": ("address",),
    "total_supply": (),
    "transfer": ("address", "uint256"),
}


def init(root: bytes, claim_amount: int = DEFAULT_CLAIM_AMOUNT) -> None:
    fungible_drop.init(root, claim_amount)


def claim(proof: List[bytes], index: int) -> bool:
    return fungible_drop.claim(LEDGER, proof, index)


def is_claimed(index: int) -> bool:
    return LEDGER.is_claimed(index)


def merkle_root() -> bytes:
    return common.merkle_root()


def claim_amount() -> int:
    return fungible_drop.claim_amount()


def balance_of(owner: bytes) -> int:
    return fungible.balance_of(owner)


def total_supply() -> int:
    return fungible.total_supply()


def transfer(to: bytes, amount: int) -> bool:
    return fungible.transfer(env.sender(), to, amount)
