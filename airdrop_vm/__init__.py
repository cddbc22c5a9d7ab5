"""
airdrop_vm
==========

A small deterministic contract host for Python contract modules.

    from airdrop_vm import LocalChain
    chain = LocalChain()

See :mod:`airdrop_vm.runtime.host` for the transaction model and
:mod:`airdrop_vm.stdlib` for what contracts may import.
"""

from __future__ import annotations

from .errors import OutOfGas, Revert, ValidationError, VmError
from .runtime.host import LocalChain, Receipt
from .version import __version__

__all__ = [
    "LocalChain",
    "Receipt",
    "VmError",
    "Revert",
    "OutOfGas",
    "ValidationError",
    "__version__",
]
