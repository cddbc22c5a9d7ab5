# -*- coding: utf-8 -*-
"""
Packed claim flags: 256 indices per storage word.

    word_index, bit = divmod(index, 256)
    key             = prefix || uint256_be(word_index)
    value           = 32-byte big-endian word; bit ``bit`` set means claimed

``mark_claimed`` is a read-modify-write of the whole word. Within one
transaction this is safe because the host applies transactions serially and
the word is read and written inside the same call.
"""

from __future__ import annotations

from typing import Tuple

from airdrop_vm.stdlib import storage

from . import WORD_BITS, require_index, slot_key


def word_position(index: int) -> Tuple[int, int]:
    """``(word_index, bit)`` for ``index``."""
    return divmod(index, WORD_BITS)


class BitmapClaimLedger:
    __slots__ = ("prefix",)

    def __init__(self, prefix: bytes) -> None:
        self.prefix = bytes(prefix)

    def word(self, word_index: int) -> int:
        return storage.get_u256(slot_key(self.prefix, word_index))

    def is_claimed(self, index: int) -> bool:
        require_index(index)
        word_index, bit = word_position(index)
        return (self.word(word_index) >> bit) & 1 == 1

    def mark_claimed(self, index: int) -> None:
        require_index(index)
        word_index, bit = word_position(index)
        w = self.word(word_index)
        storage.set_u256(slot_key(self.prefix, word_index), w | (1 << bit))

    def __repr__(self) -> str:  # pragma: no cover
        return f"BitmapClaimLedger(prefix={self.prefix!r})"
