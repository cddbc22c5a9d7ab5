# -*- coding: utf-8 -*-
"""
airdrop_contracts.tests.conftest
================================

Fixtures for the airdrop contracts:

- ``chain``      a fresh :class:`~airdrop_vm.LocalChain` (automine on)
- ``accounts``   deterministic named accounts
- ``allowlist``  the 5-entry distribution used by most scenarios; entry ``i``
                 belongs to ``accounts["claimant{i}"]``
- ``mapping_drop`` / ``bitmap_drop`` / ``nft_drop``  deployed contracts

Usage (inside a test file):
    def test_claim(chain, mapping_drop, allowlist):
        c = allowlist.claims[2]
        chain.transact(mapping_drop, "claim", list(c.proof), c.index, sender=c.address)
"""
from __future__ import annotations

from typing import Dict

import pytest

from airdrop_vm import LocalChain

from airdrop_contracts import BITMAP_CONTRACT, MAPPING_CONTRACT, NFT_CONTRACT
from airdrop_contracts.stdlib.reveal import MIN_DELAY, commitment_for_seed
from airdrop_contracts.tools.merkle_tree import Allowlist, Claim, build_allowlist

N_CLAIMANTS = 5
CLAIM_AMOUNT = 100 * 10**18
MAX_SUPPLY = 3
SEED = 424242


@pytest.fixture
def chain() -> LocalChain:
    return LocalChain()


@pytest.fixture
def accounts(chain) -> Dict[str, bytes]:
    names = ["owner", "outsider", "recipient"] + [f"claimant{i}" for i in range(N_CLAIMANTS)]
    return {n: chain.account(n) for n in names}


@pytest.fixture
def allowlist(accounts) -> Allowlist:
    return build_allowlist([accounts[f"claimant{i}"] for i in range(N_CLAIMANTS)])


@pytest.fixture
def mapping_drop(chain, accounts, allowlist) -> bytes:
    return chain.deploy(MAPPING_CONTRACT, allowlist.root, CLAIM_AMOUNT, sender=accounts["owner"])


@pytest.fixture
def bitmap_drop(chain, accounts, allowlist) -> bytes:
    return chain.deploy(BITMAP_CONTRACT, allowlist.root, CLAIM_AMOUNT, sender=accounts["owner"])


@pytest.fixture
def nft_drop(chain, accounts, allowlist) -> bytes:
    return chain.deploy(NFT_CONTRACT, allowlist.root, MAX_SUPPLY, sender=accounts["owner"])


# --- helpers shared by the NFT tests ---------------------------------------------


def commit_and_wait(chain: LocalChain, nft: bytes, who: bytes, seed: int = SEED) -> int:
    """Commit for ``who`` and mine until the next transaction may reveal."""
    rcpt = chain.transact(nft, "commit", commitment_for_seed(seed), sender=who)
    chain.mine(MIN_DELAY - 1)
    return rcpt.block_height


def reveal_and_claim(chain: LocalChain, nft: bytes, claim: Claim, *, ledger: str = "mapping", seed: int = SEED):
    return chain.transact(
        nft, f"reveal_and_claim_{ledger}", list(claim.proof), claim.index, seed, sender=claim.address
    )
