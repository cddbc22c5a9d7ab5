# -*- coding: utf-8 -*-
"""
Enumerable non-fungible token registry
======================================

Ownership, approvals and enumeration for the NFT airdrop. Token ids are
uint256; there is no burn.

Storage
-------
- ``K_OWNER     || id``             owner address (20B)
- ``K_BALANCE   || owner``          u256 count of tokens held
- ``K_OWNED     || owner || i``     id of the owner's i-th token
- ``K_OWNED_IDX || id``             position of ``id`` in its owner's list
- ``K_ALL       || i``              id of the i-th token ever minted
- ``K_TOTAL``                       u256 number of minted tokens
- ``K_APPROVED  || id``             single-token approval (20B), absent if none
- ``K_OPERATOR  || owner || op``    b"\\x01" if ``op`` may manage all of owner's tokens

Owner enumeration uses swap-and-pop on transfer, so
``token_of_owner_by_index`` order is not stable across transfers.

Receiver hook
-------------
``mint`` calls ``on_token_received(operator, from, token_id)`` on a contract
recipient *after* every storage write above has happened. The hook must
return ``True``. Anything it does (including re-entering the minting
contract) sees the post-mint state, and any failure reverts the whole
transaction.
"""

from __future__ import annotations

from typing import Final, Optional

from airdrop_vm.stdlib import abi, calls, events, storage

from ..math.safe_uint import u256_add, u256_sub
from . import (
    EVT_APPROVAL,
    EVT_APPROVAL_FOR_ALL,
    EVT_TRANSFER,
    ZERO_ADDRESS,
    require_address,
    require_nonzero_address,
    u256_bytes,
)

K_OWNER: Final[bytes] = b"nft:owner:"
K_BALANCE: Final[bytes] = b"nft:bal:"
K_OWNED: Final[bytes] = b"nft:owned:"
K_OWNED_IDX: Final[bytes] = b"nft:oidx:"
K_ALL: Final[bytes] = b"nft:all:"
K_TOTAL: Final[bytes] = b"nft:total"
K_APPROVED: Final[bytes] = b"nft:appr:"
K_OPERATOR: Final[bytes] = b"nft:op:"

RECEIVER_HOOK: Final[str] = "on_token_received"

ERR_NONEXISTENT: Final[bytes] = b"nonexistent token"
ERR_NOT_AUTHORIZED: Final[bytes] = b"not owner nor approved"
ERR_WRONG_FROM: Final[bytes] = b"wrong from"
ERR_OUT_OF_BOUNDS: Final[bytes] = b"index out of bounds"
ERR_EXISTS: Final[bytes] = b"token already minted"
ERR_SELF_APPROVAL: Final[bytes] = b"approve to caller"
ERR_RECEIVER: Final[bytes] = b"receiver rejected token"

_OPERATOR_SET: Final[bytes] = b"\x01"


# ------------------------------------------------------------------------------
# Internal accessors
# ------------------------------------------------------------------------------


def _owner(token_id: int) -> Optional[bytes]:
    return storage.get(K_OWNER + u256_bytes(token_id))


def _require_owner(token_id: int) -> bytes:
    owner = _owner(token_id)
    if owner is None:
        abi.revert(ERR_NONEXISTENT)
    return owner


def _owned_key(owner: bytes, i: int) -> bytes:
    return K_OWNED + bytes(owner) + u256_bytes(i)


def _add_to_owner(owner: bytes, token_id: int) -> None:
    n = balance_of(owner)
    storage.set(_owned_key(owner, n), u256_bytes(token_id))
    storage.set_u256(K_OWNED_IDX + u256_bytes(token_id), n)
    storage.set_u256(K_BALANCE + bytes(owner), u256_add(n, 1))
    storage.set(K_OWNER + u256_bytes(token_id), bytes(owner))


def _remove_from_owner(owner: bytes, token_id: int) -> None:
    last = u256_sub(balance_of(owner), 1)
    idx = storage.get_u256(K_OWNED_IDX + u256_bytes(token_id))
    if idx != last:
        moved = storage.get(_owned_key(owner, last))
        storage.set(_owned_key(owner, idx), moved)
        storage.set_u256(K_OWNED_IDX + moved, idx)
    storage.delete(_owned_key(owner, last))
    storage.set_u256(K_BALANCE + bytes(owner), last)


def _is_authorized(caller: bytes, owner: bytes, token_id: int) -> bool:
    if caller == owner:
        return True
    if storage.get(K_APPROVED + u256_bytes(token_id)) == caller:
        return True
    return is_approved_for_all(owner, caller)


# ------------------------------------------------------------------------------
# Views
# ------------------------------------------------------------------------------


def exists(token_id: int) -> bool:
    return _owner(token_id) is not None


def owner_of(token_id: int) -> bytes:
    return _require_owner(token_id)


def balance_of(owner: bytes) -> int:
    require_nonzero_address(owner)
    return storage.get_u256(K_BALANCE + bytes(owner))


def total_supply() -> int:
    return storage.get_u256(K_TOTAL)


def token_by_index(index: int) -> int:
    if index >= total_supply():
        abi.revert(ERR_OUT_OF_BOUNDS)
    return storage.get_u256(K_ALL + u256_bytes(index))


def token_of_owner_by_index(owner: bytes, index: int) -> int:
    if index >= balance_of(owner):
        abi.revert(ERR_OUT_OF_BOUNDS)
    return int.from_bytes(storage.get(_owned_key(owner, index)), "big")


def get_approved(token_id: int) -> bytes:
    _require_owner(token_id)
    return storage.get(K_APPROVED + u256_bytes(token_id), ZERO_ADDRESS)


def is_approved_for_all(owner: bytes, operator: bytes) -> bool:
    require_address(owner)
    require_address(operator)
    return storage.get(K_OPERATOR + bytes(owner) + bytes(operator)) == _OPERATOR_SET


# ------------------------------------------------------------------------------
# State-changing (explicit caller)
# ------------------------------------------------------------------------------


def approve(caller: bytes, to: bytes, token_id: int) -> None:
    owner = _require_owner(token_id)
    require_address(to)
    if caller != owner and not is_approved_for_all(owner, caller):
        abi.revert(ERR_NOT_AUTHORIZED)
    key = K_APPROVED + u256_bytes(token_id)
    if to == ZERO_ADDRESS:
        storage.delete(key)
    else:
        storage.set(key, bytes(to))
    events.emit(EVT_APPROVAL, {"owner": owner, "approved": bytes(to), "token_id": token_id})


def set_approval_for_all(caller: bytes, operator: bytes, approved: bool) -> None:
    require_address(caller)
    require_nonzero_address(operator)
    if caller == operator:
        abi.revert(ERR_SELF_APPROVAL)
    key = K_OPERATOR + bytes(caller) + bytes(operator)
    if approved:
        storage.set(key, _OPERATOR_SET)
    else:
        storage.delete(key)
    events.emit(EVT_APPROVAL_FOR_ALL, {"owner": bytes(caller), "operator": bytes(operator), "approved": bool(approved)})


def transfer_from(caller: bytes, from_: bytes, to: bytes, token_id: int) -> None:
    owner = _require_owner(token_id)
    if owner != from_:
        abi.revert(ERR_WRONG_FROM)
    require_nonzero_address(to)
    if not _is_authorized(caller, owner, token_id):
        abi.revert(ERR_NOT_AUTHORIZED)
    storage.delete(K_APPROVED + u256_bytes(token_id))
    _remove_from_owner(owner, token_id)
    _add_to_owner(to, token_id)
    events.emit(EVT_TRANSFER, {"from": owner, "to": bytes(to), "token_id": token_id})


def mint(operator: bytes, to: bytes, token_id: int) -> None:
    """
    Mint ``token_id`` to ``to`` and, for contract recipients, run the receiver
    hook last.
    """
    require_nonzero_address(to)
    if exists(token_id):
        abi.revert(ERR_EXISTS)
    total = total_supply()
    storage.set(K_ALL + u256_bytes(total), u256_bytes(token_id))
    storage.set_u256(K_TOTAL, u256_add(total, 1))
    _add_to_owner(to, token_id)
    events.emit(EVT_TRANSFER, {"from": ZERO_ADDRESS, "to": bytes(to), "token_id": token_id})

    if calls.is_contract(to):
        accepted = calls.call(to, RECEIVER_HOOK, operator, ZERO_ADDRESS, token_id)
        abi.require(accepted is True, ERR_RECEIVER)


__all__ = [
    "RECEIVER_HOOK",
    "exists",
    "owner_of",
    "balance_of",
    "total_supply",
    "token_by_index",
    "token_of_owner_by_index",
    "get_approved",
    "is_approved_for_all",
    "approve",
    "set_approval_for_all",
    "transfer_from",
    "mint",
]
