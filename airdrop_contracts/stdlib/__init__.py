# -*- coding: utf-8 -*-
"""
airdrop_contracts.stdlib
========================

Contract-side standard library. Everything here runs *inside* a contract call
(storage, events and gas come from :mod:`airdrop_vm.stdlib`) but degrades to
plain deterministic Python when no host is bound, so the pure parts (leaf
hashing, proof folding) are shared with the off-chain tools.

Modules
-------
- merkle     sorted-pair Keccak-256 inclusion proofs
- claims     ``ClaimLedger`` with mapping and bitmap implementations
- reveal     per-claimant commit-reveal gate
- dispenser  verify -> check -> mark ordering shared by every claim path
- token      fungible balances and an enumerable NFT registry
- multicall  batch dispatcher with a denylist of minting selectors
- math       checked u256 arithmetic
"""
