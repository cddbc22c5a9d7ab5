# -*- coding: utf-8 -*-
"""
Claim ledgers outside the host: both layouts must agree on every index.
"""
from __future__ import annotations

import pytest
from hypothesis import given, settings, strategies as st

from airdrop_vm import Revert
from airdrop_vm.runtime import storage_api

from airdrop_contracts.stdlib.claims import (
    WORD_BITS,
    BitmapClaimLedger,
    ClaimLedger,
    MappingClaimLedger,
    word_position,
)

INDEX = st.integers(min_value=0, max_value=4 * WORD_BITS)


@pytest.mark.parametrize(
    "index, pos",
    [(0, (0, 0)), (255, (0, 255)), (256, (1, 0)), (513, (2, 1))],
)
def test_word_position(index, pos):
    assert word_position(index) == pos


def test_ledgers_satisfy_protocol():
    assert isinstance(MappingClaimLedger(b"m:"), ClaimLedger)
    assert isinstance(BitmapClaimLedger(b"b:"), ClaimLedger)


@settings(max_examples=60, deadline=None)
@given(marks=st.lists(INDEX, max_size=20), probes=st.lists(INDEX, max_size=20))
def test_mapping_and_bitmap_agree(marks, probes):
    storage_api.reset_backend()
    mapping = MappingClaimLedger(b"m:")
    bitmap = BitmapClaimLedger(b"b:")
    for i in marks:
        if not mapping.is_claimed(i):
            mapping.mark_claimed(i)
            bitmap.mark_claimed(i)
    for i in set(marks) | set(probes):
        assert mapping.is_claimed(i) == bitmap.is_claimed(i) == (i in marks)


def test_bitmap_word_layout():
    ledger = BitmapClaimLedger(b"b:")
    ledger.mark_claimed(1)
    ledger.mark_claimed(3)
    ledger.mark_claimed(256)
    assert ledger.word(0) == 0b1010
    assert ledger.word(1) == 1
    assert not ledger.is_claimed(2)


def test_prefixes_isolate_ledgers():
    a = MappingClaimLedger(b"a:")
    b = MappingClaimLedger(b"b:")
    a.mark_claimed(7)
    assert a.is_claimed(7)
    assert not b.is_claimed(7)


@pytest.mark.parametrize("ledger", [MappingClaimLedger(b"m:"), BitmapClaimLedger(b"b:")])
@pytest.mark.parametrize("bad", [-1, 1 << 256, True])
def test_bad_index_reverts(ledger, bad):
    with pytest.raises(Revert):
        ledger.is_claimed(bad)
