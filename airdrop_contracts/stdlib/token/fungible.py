# -*- coding: utf-8 -*-
"""
Fungible balances credited by the mapping and bitmap airdrops.

Storage
-------
- ``K_BALANCE || addr``  u256 balance (32B big-endian)
- ``K_TOTAL``            u256 total supply

State-changing helpers take an explicit ``caller``; contracts pass
``env.sender()``.
"""

from __future__ import annotations

from typing import Final

from airdrop_vm.stdlib import abi, events, storage

from ..math.safe_uint import u256_add, u256_sub
from . import EVT_TRANSFER, ZERO_ADDRESS, require_address, require_amount, require_nonzero_address

K_BALANCE: Final[bytes] = b"tok:bal:"
K_TOTAL: Final[bytes] = b"tok:total"

ERR_INSUFFICIENT: Final[bytes] = b"insufficient balance"


def balance_of(addr: bytes) -> int:
    require_address(addr)
    return storage.get_u256(K_BALANCE + bytes(addr))


def total_supply() -> int:
    return storage.get_u256(K_TOTAL)


def _set_balance(addr: bytes, amount: int) -> None:
    storage.set_u256(K_BALANCE + bytes(addr), amount)


def mint_to(to: bytes, amount: int) -> None:
    """Create ``amount`` new tokens for ``to``."""
    require_nonzero_address(to)
    require_amount(amount)
    storage.set_u256(K_TOTAL, u256_add(total_supply(), amount))
    _set_balance(to, u256_add(balance_of(to), amount))
    events.emit(EVT_TRANSFER, {"from": ZERO_ADDRESS, "to": bytes(to), "value": amount})


def transfer(caller: bytes, to: bytes, amount: int) -> bool:
    require_address(caller)
    require_nonzero_address(to)
    require_amount(amount)
    bal = balance_of(caller)
    abi.require(bal >= amount, ERR_INSUFFICIENT)
    _set_balance(caller, u256_sub(bal, amount))
    _set_balance(to, u256_add(balance_of(to), amount))
    events.emit(EVT_TRANSFER, {"from": bytes(caller), "to": bytes(to), "value": amount})
    return True


__all__ = ["balance_of", "total_supply", "mint_to", "transfer"]
