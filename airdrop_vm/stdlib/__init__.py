"""
airdrop_vm.stdlib
=================

Contract-facing standard library surface.

Contracts do:

    from airdrop_vm.stdlib import abi, calls, env, events, hash, storage

Exports
-------
- storage : get/set/delete/exists plus u256 helpers (gas-metered)
- events  : emit(name: bytes, args: dict)
- hash    : keccak256(b), sha3_256(b)
- abi     : require(cond, reason), revert(reason)
- env     : sender(), origin(), this_address(), block_height(), timestamp(), chain_id()
- calls   : is_contract(addr), call(addr, fn, *args)
"""

from __future__ import annotations

from . import abi, calls, env, events, hash, storage

__all__ = ("abi", "calls", "env", "events", "hash", "storage")
