# -*- coding: utf-8 -*-
"""
airdrop_contracts
=================

Merkle-proof airdrop contracts for the ``airdrop_vm`` host.

Layout
------
- ``stdlib/``   contract-side building blocks (verifier, claim ledgers,
                commit-reveal gate, token bookkeeping, batch dispatcher)
- ``airdrop/``  the deployable contracts: mapping, bitmap and NFT variants
- ``tools/``    off-chain tree builder and the ``airdrop`` CLI
"""

from __future__ import annotations

from airdrop_vm.version import __version__

MAPPING_CONTRACT = "airdrop_contracts.airdrop.mapping.contract"
BITMAP_CONTRACT = "airdrop_contracts.airdrop.bitmap.contract"
NFT_CONTRACT = "airdrop_contracts.airdrop.nft.contract"

__all__ = ["__version__", "MAPPING_CONTRACT", "BITMAP_CONTRACT", "NFT_CONTRACT"]
