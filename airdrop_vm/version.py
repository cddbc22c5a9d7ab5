"""airdrop_vm.version: semantic version resolution.

This module exposes:
- __version__: a PEP 440-compliant version string
- compute_version(): resolution order → env → package metadata → fallback

Environment override:
- AIRDROP_VERSION
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata
from typing import Optional

# Bump on changes that affect storage layout, calldata or gas outputs.
BASE_VERSION = "0.1.0"

DIST_NAME = "merkle-airdrop"


def _pkg_metadata_version(dist_name: str = DIST_NAME) -> Optional[str]:
    """Try to read installed package version; None if unavailable."""
    try:
        v = importlib_metadata.version(dist_name)
    except importlib_metadata.PackageNotFoundError:
        return None
    return v if v and v != "0.0.0" else None


@lru_cache(maxsize=1)
def compute_version() -> str:
    """
    Resolve a version string with this precedence:
      1) AIRDROP_VERSION (exact value)
      2) Installed package metadata version for 'merkle-airdrop'
      3) BASE_VERSION + '+dev'
    """
    val = os.getenv("AIRDROP_VERSION")
    if val:
        return val

    meta_v = _pkg_metadata_version()
    if meta_v:
        return meta_v

    return f"{BASE_VERSION}+dev"


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "DIST_NAME", "compute_version"]
