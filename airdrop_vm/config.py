"""
airdrop_vm.config: runtime feature flags and numeric caps.

This module centralizes configuration for the local contract host. It has
NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (AIRDROP_VM_*)
  2) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - AIRDROP_VM_STRICT                (bool)   default: true
  - AIRDROP_VM_AUTOMINE              (bool)   default: true
  - AIRDROP_VM_GAS_LIMIT             (int)    default: 30_000_000
  - AIRDROP_VM_MAX_CALL_DEPTH        (int)    default: 64
  - AIRDROP_VM_MAX_STORAGE_KEY_BYTES (int)    default: 96
  - AIRDROP_VM_MAX_STORAGE_VAL_BYTES (int)    default: 4096
  - AIRDROP_VM_MAX_LOGS_PER_TX       (int)    default: 1024
  - AIRDROP_VM_CHAIN_ID              (int)    default: 1337

Usage:
    from airdrop_vm.config import load_config
    CFG = load_config()
    if CFG.automine: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict


# ----------------------------- helpers ---------------------------------------


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class VMConfig:
    # Feature flags
    strict_mode: bool
    automine: bool

    # Chain parameters
    chain_id: int
    gas_limit: int

    # Numeric caps / limits (enforced by the runtime)
    max_call_depth: int
    max_storage_key_bytes: int
    max_storage_value_bytes: int
    max_logs_per_tx: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "strict_mode": self.strict_mode,
            "automine": self.automine,
            "chain_id": self.chain_id,
            "gas_limit": self.gas_limit,
            "max_call_depth": self.max_call_depth,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "max_storage_value_bytes": self.max_storage_value_bytes,
            "max_logs_per_tx": self.max_logs_per_tx,
        }


@lru_cache(maxsize=1)
def load_config() -> VMConfig:
    """
    Build and cache a VMConfig from environment + safe defaults.

    Tests that tweak the environment should call ``load_config.cache_clear()``.
    """
    return VMConfig(
        strict_mode=_env_bool("AIRDROP_VM_STRICT", True),
        automine=_env_bool("AIRDROP_VM_AUTOMINE", True),
        chain_id=_env_int("AIRDROP_VM_CHAIN_ID", 1337, min_v=0, max_v=2**63 - 1),
        gas_limit=_env_int("AIRDROP_VM_GAS_LIMIT", 30_000_000, min_v=21_000, max_v=2**63 - 1),
        max_call_depth=_env_int("AIRDROP_VM_MAX_CALL_DEPTH", 64, min_v=1, max_v=1024),
        max_storage_key_bytes=_env_int("AIRDROP_VM_MAX_STORAGE_KEY_BYTES", 96, min_v=1, max_v=256),
        max_storage_value_bytes=_env_int("AIRDROP_VM_MAX_STORAGE_VAL_BYTES", 4096, min_v=32, max_v=1_048_576),
        max_logs_per_tx=_env_int("AIRDROP_VM_MAX_LOGS_PER_TX", 1024, min_v=1, max_v=10_000),
    )


__all__ = ["VMConfig", "load_config"]
