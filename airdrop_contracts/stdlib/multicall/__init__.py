# -*- coding: utf-8 -*-
"""
airdrop_contracts.stdlib.multicall
==================================

Batch dispatcher: run several encoded calls against the *same* contract, with
the same sender, in one transaction.

Each entry is ``selector(4) || encode_args(types, values)`` (see
:mod:`airdrop_vm.abi`). Processing order:

1. Every entry's selector is checked against the denylist first. If any entry
   targets a minting function the batch reverts with
   ``"cannot call minting functions"`` before anything runs.
2. Every entry is resolved and decoded (``"unknown selector"``,
   ``"bad calldata"``).
3. Entries are dispatched in order. A failing entry reverts the whole
   transaction.

The denylist is data, kept in one place: :data:`MINTING_SELECTORS`.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Final, FrozenSet, List, Mapping, Sequence, Tuple

from airdrop_vm.abi import decoding, encoding
from airdrop_vm.abi.types import ABITypeError, ValidationError as ABIValidationError
from airdrop_vm.stdlib import abi

ERR_MINTING: Final[bytes] = b"cannot call minting functions"
ERR_UNKNOWN_SELECTOR: Final[bytes] = b"unknown selector"
ERR_BAD_CALLDATA: Final[bytes] = b"bad calldata"

MINTING_SIGNATURES: Final[Tuple[Tuple[str, Tuple[str, ...]], ...]] = (
    ("reveal_and_claim_mapping", ("bytes32[]", "uint256", "uint256")),
    ("reveal_and_claim_bitmap", ("bytes32[]", "uint256", "uint256")),
)

MINTING_SELECTORS: Final[FrozenSet[bytes]] = frozenset(
    encoding.selector(name, types) for name, types in MINTING_SIGNATURES
)


def selector_table(exports: Mapping[str, Sequence[str]]) -> Dict[bytes, Tuple[str, Tuple[str, ...]]]:
    """Map selector -> (name, types) for every exported function except ``init``."""
    return {
        encoding.selector(name, types): (name, tuple(types))
        for name, types in exports.items()
        if name != "init"
    }


def dispatch(
    data: Sequence[bytes],
    *,
    exports: Mapping[str, Sequence[str]],
    handlers: Mapping[str, Callable[..., Any]],
    denylist: FrozenSet[bytes] = MINTING_SELECTORS,
) -> List[Any]:
    """Validate the whole batch, then call ``handlers[name](*args)`` per entry."""
    for entry in data:
        if bytes(entry[: encoding.SELECTOR_LEN]) in denylist:
            abi.revert(ERR_MINTING)

    table = selector_table(exports)
    decoded: List[Tuple[str, List[Any]]] = []
    for entry in data:
        try:
            sel, body = decoding.split_call(entry)
        except (ABIValidationError, ABITypeError):
            abi.revert(ERR_BAD_CALLDATA)
        if sel not in table or table[sel][0] not in handlers:
            abi.revert(ERR_UNKNOWN_SELECTOR)
        name, types = table[sel]
        try:
            _, values = decoding.decode_call(entry, types)
        except (ABIValidationError, ABITypeError):
            abi.revert(ERR_BAD_CALLDATA)
        decoded.append((name, values))

    return [handlers[name](*values) for name, values in decoded]


__all__ = [
    "MINTING_SIGNATURES",
    "MINTING_SELECTORS",
    "ERR_MINTING",
    "ERR_UNKNOWN_SELECTOR",
    "selector_table",
    "dispatch",
]
