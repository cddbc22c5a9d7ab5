# -*- coding: utf-8 -*-
"""
airdrop_contracts.stdlib.math
=============================

Deterministic, integer-only helpers shared by token bookkeeping. No floats.
"""

from __future__ import annotations

from typing import Final

from airdrop_vm.stdlib import abi

U256_MAX: Final[int] = (1 << 256) - 1

ERR_OOB: Final[bytes] = b"uint out of range"


def is_u256(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U256_MAX


def require_u256(*xs: int) -> None:
    """Revert unless every argument is an int in [0, U256_MAX]."""
    for x in xs:
        if not is_u256(x):
            abi.revert(ERR_OOB)


__all__ = ["U256_MAX", "ERR_OOB", "is_u256", "require_u256"]
