"""
Contract-facing assertion helpers.

    abi.require(cond, b"reason")
    abi.revert(b"reason")

Both raise :class:`airdrop_vm.errors.Revert`; the host rolls back the whole
transaction.
"""

from __future__ import annotations

from airdrop_vm.runtime.abi import require, revert

__all__ = ["require", "revert"]
