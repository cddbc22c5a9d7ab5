# -*- coding: utf-8 -*-
"""
Per-claim gas of the two ledger layouts. The only difference between the
mapping and bitmap contracts is the ledger, so identical claim sequences
differ exactly by the ledger's storage traffic.
"""
from __future__ import annotations

import pytest

from airdrop_vm import Revert
from airdrop_vm.runtime.gasmeter import DEFAULT_SCHEDULE as S


def _claim_gas(chain, drop, allowlist):
    return [
        chain.transact(drop, "claim", list(c.proof), c.index, sender=c.address).gas_used
        for c in allowlist.claims
    ]


def test_bitmap_cheaper_once_indices_share_a_word(chain, mapping_drop, bitmap_drop, allowlist):
    mapping = _claim_gas(chain, mapping_drop, allowlist)
    bitmap = _claim_gas(chain, bitmap_drop, allowlist)

    # First claim in a word: extra read plus a fresh word write.
    assert bitmap[0] - mapping[0] == S.sload
    # Later claims in the same word overwrite instead of filling a new slot.
    for m, b in zip(mapping[1:], bitmap[1:]):
        assert b <= m
        assert m - b == S.sstore_set - S.sstore_reset - S.sload
    assert sum(bitmap) < sum(mapping)


def test_failed_claim_reports_no_receipt(chain, mapping_drop, allowlist):
    c = allowlist.claims[0]
    chain.transact(mapping_drop, "claim", list(c.proof), c.index, sender=c.address)
    n = len(chain.receipts)
    with pytest.raises(Revert):
        chain.transact(mapping_drop, "claim", list(c.proof), c.index, sender=c.address)
    assert len(chain.receipts) == n
