# -*- coding: utf-8 -*-
"""
airdrop_contracts.stdlib.math.safe_uint
=======================================

Checked U256 arithmetic: revert on overflow/underflow instead of wrapping.
"""

from __future__ import annotations

from typing import Final

from airdrop_vm.stdlib import abi

from . import U256_MAX, require_u256

ERR_OVER: Final[bytes] = b"uint overflow"
ERR_UNDER: Final[bytes] = b"uint underflow"


def u256_add(x: int, y: int) -> int:
    require_u256(x, y)
    z = x + y
    if z > U256_MAX:
        abi.revert(ERR_OVER)
    return z


def u256_sub(x: int, y: int) -> int:
    require_u256(x, y)
    if y > x:
        abi.revert(ERR_UNDER)
    return x - y


def u256_inc(x: int) -> int:
    return u256_add(x, 1)


__all__ = ["u256_add", "u256_sub", "u256_inc", "ERR_OVER", "ERR_UNDER"]
