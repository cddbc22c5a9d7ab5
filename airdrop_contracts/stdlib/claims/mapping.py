# -*- coding: utf-8 -*-
"""One storage slot per index: ``prefix || uint256_be(index)`` -> ``b"\\x01"``."""

from __future__ import annotations

from typing import Final

from airdrop_vm.stdlib import storage

from . import require_index, slot_key

CLAIMED: Final[bytes] = b"\x01"


class MappingClaimLedger:
    __slots__ = ("prefix",)

    def __init__(self, prefix: bytes) -> None:
        self.prefix = bytes(prefix)

    def is_claimed(self, index: int) -> bool:
        require_index(index)
        return storage.get(slot_key(self.prefix, index)) is not None

    def mark_claimed(self, index: int) -> None:
        require_index(index)
        storage.set(slot_key(self.prefix, index), CLAIMED)

    def __repr__(self) -> str:  # pragma: no cover
        return f"MappingClaimLedger(prefix={self.prefix!r})"
