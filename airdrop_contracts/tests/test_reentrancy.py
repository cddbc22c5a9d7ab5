# -*- coding: utf-8 -*-
"""
Receiver hooks run after the claim is recorded: a re-entrant claimant sees
its index as claimed and cannot mint twice.

On the NFT drop a re-entrant reveal already fails at the commit-reveal gate
(same height, commitment consumed). The ungated hooked drop lets the
re-entrant call reach the claim ledger itself.
"""
from __future__ import annotations

import pytest

from airdrop_vm import Revert

from airdrop_contracts import NFT_CONTRACT
from airdrop_contracts.stdlib.reveal import MIN_DELAY, commitment_for_seed
from airdrop_contracts.tools.merkle_tree import build_allowlist

from . import hooked_drop_contract as hd
from . import receiver_contract as rc
from .conftest import SEED

RECEIVER = "airdrop_contracts.tests.receiver_contract"
HOOKED_DROP = "airdrop_contracts.tests.hooked_drop_contract"


@pytest.fixture
def setup(chain, accounts):
    """Deploy a receiver for ``mode``; it owns allowlist index 1."""

    def make(mode):
        owner = accounts["owner"]
        receiver = chain.deploy(RECEIVER, mode, sender=owner)
        dist = build_allowlist([accounts["claimant0"], receiver, accounts["claimant2"]])
        nft = chain.deploy(NFT_CONTRACT, dist.root, 10, sender=owner)
        chain.transact(receiver, "commit", nft, commitment_for_seed(SEED), sender=owner)
        chain.mine(MIN_DELAY - 1)
        return receiver, nft, dist.claims[1]

    return make


def _claim(chain, receiver, nft, claim, owner):
    return chain.transact(receiver, "claim", nft, list(claim.proof), claim.index, SEED, sender=owner)


def test_hook_observes_claimed_flag(chain, accounts, setup):
    receiver, nft, claim = setup(rc.MODE_OBSERVE)
    rcpt = _claim(chain, receiver, nft, claim, accounts["owner"])
    assert rcpt.return_value == 1
    assert chain.call(receiver, "seen_claimed") is True
    assert chain.call(receiver, "hook_calls") == 1
    assert chain.call(nft, "owner_of", 1) == receiver


@pytest.mark.parametrize("mode", [rc.MODE_REENTER_MAPPING, rc.MODE_REENTER_BITMAP])
def test_reentrant_claim_reverts_everything(chain, accounts, setup, mode):
    receiver, nft, claim = setup(mode)
    before = chain.state_snapshot()
    with pytest.raises(Revert, match="no commitment"):
        _claim(chain, receiver, nft, claim, accounts["owner"])
    assert chain.state_snapshot() == before
    assert chain.call(nft, "total_supply") == 0
    assert not chain.call(nft, "is_claimed_mapping", claim.index)
    assert not chain.call(nft, "is_claimed_bitmap", claim.index)


def test_rejecting_receiver(chain, accounts, setup):
    receiver, nft, claim = setup(rc.MODE_REJECT)
    with pytest.raises(Revert, match="receiver rejected token"):
        _claim(chain, receiver, nft, claim, accounts["owner"])
    assert chain.call(nft, "total_supply") == 0


@pytest.mark.parametrize("ledger", [hd.LEDGER_MAPPING, hd.LEDGER_BITMAP])
def test_hooked_drop_pays_once(chain, accounts, ledger):
    owner, claimant = accounts["owner"], accounts["claimant0"]
    dist = build_allowlist([claimant, accounts["claimant1"]])
    drop = chain.deploy(HOOKED_DROP, dist.root, ledger, sender=owner)
    c = dist.claims[0]
    chain.transact(drop, "claim", list(c.proof), c.index, sender=claimant)
    with pytest.raises(Revert, match="already claimed"):
        chain.transact(drop, "claim", list(c.proof), c.index, sender=claimant)
    assert chain.call(drop, "payouts") == 1


@pytest.mark.parametrize("ledger", [hd.LEDGER_MAPPING, hd.LEDGER_BITMAP])
def test_reentrant_claim_hits_claimed_flag(chain, accounts, ledger):
    owner = accounts["owner"]
    receiver = chain.deploy(RECEIVER, rc.MODE_REENTER_CLAIM, sender=owner)
    dist = build_allowlist([accounts["claimant0"], receiver])
    drop = chain.deploy(HOOKED_DROP, dist.root, ledger, sender=owner)
    claim = dist.claims[1]

    before = chain.state_snapshot()
    with pytest.raises(Revert, match="already claimed"):
        chain.transact(receiver, "claim_drop", drop, list(claim.proof), claim.index, sender=owner)
    assert chain.state_snapshot() == before
    assert chain.call(drop, "payouts") == 0
    assert not chain.call(drop, "is_claimed", claim.index)
    assert chain.call(receiver, "hook_calls") == 0
