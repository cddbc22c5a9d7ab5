"""
Read-only execution environment for contracts.

    env.sender()        immediate caller of the running contract
    env.origin()        account that signed the transaction
    env.this_address()  address of the running contract
    env.block_height()  height of the block being executed
    env.timestamp()     block timestamp
    env.chain_id()
"""

from __future__ import annotations

from airdrop_vm.runtime.context import current_frame


def sender() -> bytes:
    return current_frame().caller


def origin() -> bytes:
    return current_frame().tx.origin


def this_address() -> bytes:
    return current_frame().address


def block_height() -> int:
    return current_frame().block.height


def timestamp() -> int:
    return current_frame().block.timestamp


def chain_id() -> int:
    return current_frame().block.chain_id


__all__ = ["sender", "origin", "this_address", "block_height", "timestamp", "chain_id"]
