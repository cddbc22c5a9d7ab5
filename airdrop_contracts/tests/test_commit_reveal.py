# -*- coding: utf-8 -*-
"""
Commit-reveal gate on the NFT airdrop.

A commit mined at height ``c`` may be revealed by a transaction executing at
height ``c + MIN_DELAY`` or later.
"""
from __future__ import annotations

import pytest

from airdrop_vm import Revert, ValidationError

from airdrop_contracts import NFT_CONTRACT
from airdrop_contracts.stdlib import reveal
from airdrop_contracts.stdlib.reveal import MIN_DELAY, commitment_for_seed
from airdrop_contracts.tools.merkle_tree import build_allowlist

from .conftest import SEED, commit_and_wait, reveal_and_claim


def test_commitment_is_keccak_of_decimal_seed():
    from airdrop_vm.runtime.hash_api import keccak256

    assert commitment_for_seed(SEED) == keccak256(b"424242")
    assert commitment_for_seed(0) == keccak256(b"0")


@pytest.mark.parametrize("bad", [-1, 1 << 256, True, "42"])
def test_commitment_for_seed_rejects(bad):
    with pytest.raises(ValueError):
        commitment_for_seed(bad)


def test_commit_records_hash_and_height(chain, nft_drop, allowlist):
    c = allowlist.claims[0]
    rcpt = chain.transact(nft_drop, "commit", commitment_for_seed(SEED), sender=c.address)
    assert rcpt.event_names() == [b"Committed"]
    h, height, state = chain.call(nft_drop, "commitment_of", c.address)
    assert h == commitment_for_seed(SEED)
    assert height == rcpt.block_height
    assert state == reveal.STATE_COMMITTED


def test_reveal_without_commitment(chain, nft_drop, allowlist):
    with pytest.raises(Revert, match="no commitment"):
        reveal_and_claim(chain, nft_drop, allowlist.claims[0])


def test_reveal_timing_boundary(chain, nft_drop, allowlist):
    c = allowlist.claims[0]
    committed_at = chain.transact(nft_drop, "commit", commitment_for_seed(SEED), sender=c.address).block_height
    chain.mine(MIN_DELAY - 2)

    # Executes at committed_at + MIN_DELAY - 1.
    with pytest.raises(Revert, match="reveal too early"):
        reveal_and_claim(chain, nft_drop, c)

    chain.mine(1)
    rcpt = reveal_and_claim(chain, nft_drop, c)
    assert rcpt.block_height == committed_at + MIN_DELAY
    assert rcpt.return_value == 1


def test_invalid_seed(chain, nft_drop, allowlist):
    c = allowlist.claims[0]
    commit_and_wait(chain, nft_drop, c.address)
    with pytest.raises(Revert, match="invalid seed"):
        reveal_and_claim(chain, nft_drop, c, seed=SEED + 1)
    # The commitment survives a failed reveal.
    assert reveal_and_claim(chain, nft_drop, c).return_value == 1


def test_recommit_while_pending(chain, nft_drop, allowlist):
    c = allowlist.claims[0]
    chain.transact(nft_drop, "commit", commitment_for_seed(1), sender=c.address)
    with pytest.raises(Revert, match="commitment pending"):
        chain.transact(nft_drop, "commit", commitment_for_seed(2), sender=c.address)


def test_reveal_consumes_commitment(chain, nft_drop, allowlist):
    c = allowlist.claims[0]
    commit_and_wait(chain, nft_drop, c.address)
    reveal_and_claim(chain, nft_drop, c)

    h, _, state = chain.call(nft_drop, "commitment_of", c.address)
    assert state == reveal.STATE_REVEALED
    assert h == b"\x00" * 32

    with pytest.raises(Revert, match="no commitment"):
        reveal_and_claim(chain, nft_drop, c, ledger="bitmap")


def test_recommit_after_reveal(chain, nft_drop, allowlist):
    c = allowlist.claims[0]
    commit_and_wait(chain, nft_drop, c.address)
    reveal_and_claim(chain, nft_drop, c)

    rcpt = chain.transact(nft_drop, "commit", commitment_for_seed(7), sender=c.address)
    h, height, state = chain.call(nft_drop, "commitment_of", c.address)
    assert (h, height, state) == (commitment_for_seed(7), rcpt.block_height, reveal.STATE_COMMITTED)
    with pytest.raises(Revert, match="commitment pending"):
        chain.transact(nft_drop, "commit", commitment_for_seed(8), sender=c.address)

    # A fresh commitment does not reopen an index that was already redeemed.
    chain.mine(MIN_DELAY - 1)
    with pytest.raises(Revert, match="already claimed"):
        reveal_and_claim(chain, nft_drop, c, seed=7)


def test_address_with_two_indices_claims_both(chain, accounts):
    a, b = accounts["claimant0"], accounts["claimant1"]
    dist = build_allowlist([a, b, a])
    nft = chain.deploy(NFT_CONTRACT, dist.root, 10, sender=accounts["owner"])
    first, second = dist.claim_for(a, 0), dist.claim_for(a, 2)

    commit_and_wait(chain, nft, a)
    assert reveal_and_claim(chain, nft, first).return_value == 1
    commit_and_wait(chain, nft, a, seed=7)
    assert reveal_and_claim(chain, nft, second, ledger="bitmap", seed=7).return_value == 2

    assert chain.call(nft, "balance_of", a) == 2
    assert chain.call(nft, "is_claimed_mapping", 0)
    assert chain.call(nft, "is_claimed_bitmap", 2)


def test_reveal_checked_before_proof(chain, nft_drop, allowlist, accounts):
    c = allowlist.claims[0]
    outsider = accounts["outsider"]
    with pytest.raises(Revert, match="no commitment"):
        chain.transact(nft_drop, "reveal_and_claim_mapping", list(c.proof), c.index, SEED, sender=outsider)

    commit_and_wait(chain, nft_drop, outsider)
    with pytest.raises(Revert, match="invalid proof"):
        chain.transact(nft_drop, "reveal_and_claim_mapping", list(c.proof), c.index, SEED, sender=outsider)


def test_commitment_must_be_32_bytes(chain, nft_drop, allowlist):
    with pytest.raises(ValidationError):
        chain.transact(nft_drop, "commit", b"\x01" * 31, sender=allowlist.claims[0].address)


def test_commit_is_per_account(chain, nft_drop, allowlist):
    a, b = allowlist.claims[0], allowlist.claims[1]
    commit_and_wait(chain, nft_drop, a.address)
    _, _, state = chain.call(nft_drop, "commitment_of", b.address)
    assert state == reveal.STATE_NONE
    with pytest.raises(Revert, match="no commitment"):
        reveal_and_claim(chain, nft_drop, b)
