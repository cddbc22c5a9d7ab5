"""Off-chain tooling: allowlist tree builder and the ``airdrop`` CLI."""
