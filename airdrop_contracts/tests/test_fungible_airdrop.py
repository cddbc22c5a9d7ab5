# -*- coding: utf-8 -*-
"""
Mapping and bitmap fungible airdrops: the same scenarios run against both
ledger layouts.
"""
from __future__ import annotations

import pytest

from airdrop_vm import Revert, ValidationError

from airdrop_contracts import MAPPING_CONTRACT
from airdrop_contracts.airdrop.bitmap import contract as bitmap_contract
from airdrop_contracts.stdlib.claims import slot_key

from .conftest import CLAIM_AMOUNT


@pytest.fixture(params=["mapping_drop", "bitmap_drop"])
def drop(request):
    return request.getfixturevalue(request.param)


def _claim(chain, drop, c, *, sender=None, index=None, proof=None):
    return chain.transact(
        drop,
        "claim",
        list(c.proof) if proof is None else proof,
        c.index if index is None else index,
        sender=c.address if sender is None else sender,
    )


# ---------------------------- happy path ----------------------------------------


def test_init_records_root_and_amount(chain, drop, allowlist):
    assert chain.call(drop, "merkle_root") == allowlist.root
    assert chain.call(drop, "claim_amount") == CLAIM_AMOUNT
    assert [e.name for e in chain.events(drop)] == [b"Initialized"]


def test_claim_scenario(chain, drop, allowlist):
    c2, c3 = allowlist.claims[2], allowlist.claims[3]

    rcpt = _claim(chain, drop, c2)
    assert rcpt.return_value is True
    assert b"Claimed" in rcpt.event_names()
    claimed = [e for e in rcpt.events if e.name == b"Claimed"][0]
    assert claimed.args == {"account": c2.address, "index": 2}
    assert chain.call(drop, "is_claimed", 2)
    assert chain.call(drop, "balance_of", c2.address) == CLAIM_AMOUNT

    with pytest.raises(Revert, match="already claimed"):
        _claim(chain, drop, c2)

    assert not chain.call(drop, "is_claimed", 3)
    _claim(chain, drop, c3)
    assert chain.call(drop, "is_claimed", 3)
    assert chain.call(drop, "total_supply") == 2 * CLAIM_AMOUNT


def test_every_entry_claims_once(chain, drop, allowlist):
    for c in allowlist.claims:
        _claim(chain, drop, c)
    assert all(chain.call(drop, "is_claimed", c.index) for c in allowlist.claims)
    assert chain.call(drop, "total_supply") == len(allowlist) * CLAIM_AMOUNT


# ---------------------------- rejections ----------------------------------------


def test_invalid_proof(chain, drop, allowlist):
    c = allowlist.claims[2]
    bad = [bytes([c.proof[0][0] ^ 0xFF]) + c.proof[0][1:]] + list(c.proof[1:])
    with pytest.raises(Revert, match="invalid proof"):
        _claim(chain, drop, c, proof=bad)


def test_wrong_sender(chain, drop, allowlist, accounts):
    with pytest.raises(Revert, match="invalid proof"):
        _claim(chain, drop, allowlist.claims[2], sender=accounts["outsider"])


def test_wrong_index(chain, drop, allowlist):
    with pytest.raises(Revert, match="invalid proof"):
        _claim(chain, drop, allowlist.claims[2], index=3)


def test_someone_elses_proof(chain, drop, allowlist):
    c2, c3 = allowlist.claims[2], allowlist.claims[3]
    with pytest.raises(Revert, match="invalid proof"):
        _claim(chain, drop, c3, sender=c2.address)


def test_failed_claim_changes_nothing(chain, drop, allowlist, accounts):
    before = chain.state_snapshot()
    with pytest.raises(Revert):
        _claim(chain, drop, allowlist.claims[2], sender=accounts["outsider"])
    assert chain.state_snapshot() == before


def test_malformed_proof_element_rejected_at_boundary(chain, drop, allowlist):
    with pytest.raises(ValidationError):
        _claim(chain, drop, allowlist.claims[2], proof=[b"\x00" * 31])


def test_init_only_once(chain, drop, allowlist, accounts):
    with pytest.raises(ValidationError):
        chain.transact(drop, "init", allowlist.root, CLAIM_AMOUNT, sender=accounts["owner"])


def test_zero_root_rejected(chain, accounts):
    with pytest.raises(Revert, match="bad root"):
        chain.deploy(MAPPING_CONTRACT, b"\x00" * 32, sender=accounts["owner"])


def test_zero_amount_rejected(chain, accounts, allowlist):
    with pytest.raises(Revert, match="zero claim amount"):
        chain.deploy(MAPPING_CONTRACT, allowlist.root, 0, sender=accounts["owner"])


def test_default_claim_amount(chain, accounts, allowlist):
    drop = chain.deploy(MAPPING_CONTRACT, allowlist.root, sender=accounts["owner"])
    assert chain.call(drop, "claim_amount") == 100 * 10**18


# ---------------------------- tokens --------------------------------------------


def test_transfer_claimed_tokens(chain, drop, allowlist, accounts):
    c = allowlist.claims[0]
    _claim(chain, drop, c)
    chain.transact(drop, "transfer", accounts["recipient"], 40, sender=c.address)
    assert chain.call(drop, "balance_of", accounts["recipient"]) == 40
    assert chain.call(drop, "balance_of", c.address) == CLAIM_AMOUNT - 40
    with pytest.raises(Revert):
        chain.transact(drop, "transfer", accounts["recipient"], CLAIM_AMOUNT, sender=c.address)


# ---------------------------- storage layout ------------------------------------


def test_bitmap_packs_indices_into_one_word(chain, bitmap_drop, allowlist):
    for c in allowlist.claims[:3]:
        _claim(chain, bitmap_drop, c)
    raw = chain.storage_of(bitmap_drop)[slot_key(bitmap_contract.LEDGER.prefix, 0)]
    assert int.from_bytes(raw, "big") == 0b111


def test_mapping_uses_one_slot_per_index(chain, mapping_drop, allowlist):
    from airdrop_contracts.airdrop.mapping import contract as mapping_contract

    for c in allowlist.claims[:3]:
        _claim(chain, mapping_drop, c)
    store = chain.storage_of(mapping_drop)
    for i in range(3):
        assert store[slot_key(mapping_contract.LEDGER.prefix, i)] == b"\x01"
