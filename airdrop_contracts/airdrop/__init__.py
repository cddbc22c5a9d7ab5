# -*- coding: utf-8 -*-
"""
Deployable airdrop contracts.

- ``mapping.contract``  fungible reward, one storage slot per claimed index
- ``bitmap.contract``   fungible reward, 256 claim flags per storage word
- ``nft.contract``      commit-reveal gated NFT mint with both ledgers and multicall
"""
