"""
Contract-to-contract calls.

    calls.is_contract(addr) -> bool
    calls.call(addr, fn, *args) -> Any

A nested call runs in a new frame whose ``sender()`` is the calling contract
and shares the enclosing transaction's checkpoint: if anything below raises,
the whole transaction reverts. Depth is bounded by ``max_call_depth``.
"""

from __future__ import annotations

from typing import Any

from airdrop_vm.errors import ContextError
from airdrop_vm.runtime.context import current_frame


def _host() -> Any:
    host = current_frame().host
    if host is None:
        raise ContextError("no host bound to the current frame")
    return host


def is_contract(address: bytes) -> bool:
    return bool(_host().is_contract(address))


def call(address: bytes, fn: str, *args: Any) -> Any:
    return _host().call_from_contract(address, fn, args)


__all__ = ["is_contract", "call"]
