# -*- coding: utf-8 -*-
"""
Fungible airdrop logic parameterised by claim ledger.

The mapping and bitmap contracts are this module plus a choice of
:class:`~airdrop_contracts.stdlib.claims.ClaimLedger`; everything else
(root, reward amount, balances) is identical between them.
"""

from __future__ import annotations

from typing import Final, List

from airdrop_vm.stdlib import abi, env, storage

from airdrop_contracts.stdlib import dispenser
from airdrop_contracts.stdlib.claims import ClaimLedger
from airdrop_contracts.stdlib.token import fungible, require_amount

from . import common

K_AMOUNT: Final[bytes] = b"drop:amount"

DEFAULT_CLAIM_AMOUNT: Final[int] = 100 * 10**18

ERR_ZERO_AMOUNT: Final[bytes] = b"zero claim amount"


def init(root: bytes, amount: int) -> None:
    common.initialize(root)
    require_amount(amount)
    abi.require(amount > 0, ERR_ZERO_AMOUNT)
    storage.set_u256(K_AMOUNT, amount)


def claim(ledger: ClaimLedger, proof: List[bytes], index: int) -> bool:
    sender = env.sender()
    dispenser.check_and_mark(ledger, common.merkle_root(), sender, index, proof)
    fungible.mint_to(sender, claim_amount())
    return True


def claim_amount() -> int:
    return storage.get_u256(K_AMOUNT)
