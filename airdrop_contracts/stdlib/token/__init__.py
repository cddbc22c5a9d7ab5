# -*- coding: utf-8 -*-
"""
airdrop_contracts.stdlib.token
==============================

Shared conventions for the token bookkeeping used by the airdrop contracts.
This package only provides constants and validation; the storage-backed
implementations live in :mod:`.fungible` and :mod:`.nft`.

Events (names as bytes):
  - b"Transfer"        { "from": bytes, "to": bytes, "value": int }     (fungible)
  - b"Transfer"        { "from": bytes, "to": bytes, "token_id": int }  (nft)
  - b"Approval"        { "owner": bytes, "approved": bytes, "token_id": int }
  - b"ApprovalForAll"  { "owner": bytes, "operator": bytes, "approved": bool }

Mints are reported as transfers from ``ZERO_ADDRESS``.
"""

from __future__ import annotations

from typing import Final

from airdrop_vm.stdlib import abi

from ..math import is_u256

ADDRESS_LEN: Final[int] = 20
ZERO_ADDRESS: Final[bytes] = b"\x00" * ADDRESS_LEN

EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"
EVT_APPROVAL_FOR_ALL: Final[bytes] = b"ApprovalForAll"

ERR_BAD_ADDR: Final[bytes] = b"bad address"
ERR_BAD_AMOUNT: Final[bytes] = b"bad amount"
ERR_ZERO_ADDRESS: Final[bytes] = b"zero address"


def require_address(addr: bytes) -> None:
    """Ensure ``addr`` is exactly 20 bytes."""
    if not isinstance(addr, (bytes, bytearray)) or len(addr) != ADDRESS_LEN:
        abi.revert(ERR_BAD_ADDR)


def require_nonzero_address(addr: bytes) -> None:
    require_address(addr)
    if bytes(addr) == ZERO_ADDRESS:
        abi.revert(ERR_ZERO_ADDRESS)


def require_amount(n: int) -> None:
    if not is_u256(n):
        abi.revert(ERR_BAD_AMOUNT)


def u256_bytes(n: int) -> bytes:
    return n.to_bytes(32, "big")


__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_APPROVAL_FOR_ALL",
    "require_address",
    "require_nonzero_address",
    "require_amount",
    "u256_bytes",
]
