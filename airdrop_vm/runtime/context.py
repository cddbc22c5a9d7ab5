"""
airdrop_vm.runtime.context: BlockEnv/TxEnv and the active call-frame stack.

These lightweight environments are injected by the host so contracts can read
chain/transaction metadata deterministically (block height, sender). They
contain only pure data (ints/bytes) and perform strict validation.

Design notes
------------
- Addresses are raw 20-byte values.
- Hex strings (with or without "0x") are accepted by helpers and normalized to
  bytes.
- All numeric fields are validated to be non-negative.
- The host pushes one :class:`CallFrame` per contract invocation. A nested
  call (e.g. a token receiver hook) pushes another frame whose ``caller`` is
  the calling contract; the block and tx envelopes are shared.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterator, List, Optional, Union

from airdrop_vm.errors import ContextError

ADDRESS_LEN = 20


# ----------------------------- helpers ----------------------------- #


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def to_address(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    b = to_bytes(value)
    if len(b) != ADDRESS_LEN:
        raise ContextError(f"address must be {ADDRESS_LEN} bytes, got {len(b)}")
    return b


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


# ----------------------------- models ------------------------------ #


@dataclass(frozen=True)
class BlockEnv:
    """
    Deterministic per-block environment.

    height:     Block height (0-based).
    timestamp:  Block timestamp in seconds.
    chain_id:   Integer chain identifier.
    """

    height: int
    timestamp: int
    chain_id: int

    def __post_init__(self) -> None:
        _require_non_negative_int("height", self.height)
        _require_non_negative_int("timestamp", self.timestamp)
        _require_non_negative_int("chain_id", self.chain_id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TxEnv:
    """
    Deterministic per-transaction environment.

    tx_hash:   Transaction hash bytes.
    origin:    Externally owned account that signed the transaction.
    to:        Call target, or None for a deployment.
    gas_limit: Gas available to the transaction.
    nonce:     Origin nonce.
    """

    tx_hash: bytes
    origin: bytes
    to: Optional[bytes]
    gas_limit: int
    nonce: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "tx_hash", to_bytes(self.tx_hash))
        object.__setattr__(self, "origin", to_address(self.origin))
        if self.to is not None:
            object.__setattr__(self, "to", to_address(self.to))
        _require_non_negative_int("gas_limit", self.gas_limit)
        _require_non_negative_int("nonce", self.nonce)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["tx_hash"] = to_hex(self.tx_hash)
        d["origin"] = to_hex(self.origin)
        d["to"] = to_hex(self.to) if self.to is not None else None
        return d


@dataclass(frozen=True)
class CallFrame:
    """
    One contract invocation.

    address: the contract whose code and storage are executing.
    caller:  immediate caller (the origin for top-level calls, a contract
             address for nested calls).
    host:    the object that can resolve nested calls (see host.LocalChain).
    """

    address: bytes
    caller: bytes
    block: BlockEnv
    tx: TxEnv
    depth: int = 0
    host: Any = None

    def nested(self, address: bytes) -> "CallFrame":
        return replace(self, address=address, caller=self.address, depth=self.depth + 1)


# ------------------------------ frame stack --------------------------- #

_frames: List[CallFrame] = []


def push_frame(frame: CallFrame) -> None:
    _frames.append(frame)


def pop_frame() -> CallFrame:
    if not _frames:
        raise ContextError("no active call frame to pop")
    return _frames.pop()


def current_frame() -> CallFrame:
    if not _frames:
        raise ContextError("no active contract call frame")
    return _frames[-1]


def has_frame() -> bool:
    return bool(_frames)


def reset_frames() -> None:
    """Test helper: drop every frame."""
    _frames.clear()


@contextmanager
def frame(f: CallFrame) -> Iterator[CallFrame]:
    push_frame(f)
    try:
        yield f
    finally:
        pop_frame()


__all__ = [
    "ADDRESS_LEN",
    "to_bytes",
    "to_hex",
    "to_address",
    "BlockEnv",
    "TxEnv",
    "CallFrame",
    "push_frame",
    "pop_frame",
    "current_frame",
    "has_frame",
    "reset_frames",
    "frame",
]
