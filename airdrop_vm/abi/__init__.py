"""
airdrop_vm.abi
==============

Calldata surface for the airdrop contract host.

This package provides:
  • Type specs for the scalars and arrays contracts exchange.
  • Canonical encoder/decoder utilities for arguments.
  • Function selectors and call packing used by the host and the CLI.

Everything here is pure-Python and deterministic.
"""

from __future__ import annotations

from .decoding import *  # noqa: F401,F403
from .decoding import __all__ as _all_decoding
from .encoding import *  # noqa: F401,F403
from .encoding import __all__ as _all_encoding
from .types import *  # noqa: F401,F403
from .types import __all__ as _all_types

__all__ = tuple(dict.fromkeys((*_all_types, *_all_encoding, *_all_decoding)))
