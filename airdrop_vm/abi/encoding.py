"""
Canonical calldata encoding for the airdrop contract host.

Design goals:
- Simple, deterministic, and easy to port.
- Length-prefixed for variable data; minimal big-endian integers.
- No implicit padding or alignment.

Primitives
----------
- bool:               1 byte: 0x00 (false) or 0x01 (true)
- uintN:              LEB128(len) || big-endian minimal magnitude (0 -> 0x00)
- bytes (dynamic):    LEB128(len) || raw bytes
- bytesN (fixed):     raw bytes (exactly N)
- address:            raw 20 bytes
- T[]:                LEB128(count) || item1 || ... || itemN

Calls
-----
encode_args([types...], [values...]) =>
  LEB128(count) || item1 || item2 || ... || itemN

encode_call(name, types, values) =>
  selector(name, types) || encode_args(types, values)

where selector = keccak256("name(type1,type2,...)")[:4].
"""

from __future__ import annotations

from typing import Any, Sequence, Union

from airdrop_vm.runtime.hash_api import keccak256

from .types import (
    AddressType,
    ArrayType,
    BoolType,
    BytesType,
    UIntType,
    ValidationError,
    ABITypeError,
    coerce_address,
    coerce_bool,
    coerce_bytes,
    coerce_uint,
    parse_type,
)

__all__ = [
    "SELECTOR_LEN",
    "uvarint_encode",
    "encode_bool",
    "encode_uint",
    "encode_bytes",
    "encode_address",
    "encode_value",
    "encode_args",
    "function_signature",
    "selector",
    "encode_call",
]

SELECTOR_LEN = 4

TypeSpec = Union[str, UIntType, BytesType, BoolType, AddressType, ArrayType]


# ──────────────────────────────────────────────────────────────────────────────
# Varint (unsigned LEB128) for length prefixes and counts
# ──────────────────────────────────────────────────────────────────────────────


def uvarint_encode(n: int) -> bytes:
    """Unsigned LEB128, minimal-length."""
    if not isinstance(n, int) or isinstance(n, bool):
        raise ValidationError("uvarint value must be int")
    if n < 0:
        raise ValidationError("uvarint cannot encode negative values")
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(b | 0x80)
        else:
            out.append(b)
            break
    return bytes(out)


def _minimal_be_unsigned(n: int) -> bytes:
    """Big-endian minimal bytes for a non-negative integer (0 → b'\\x00')."""
    if n == 0:
        return b"\x00"
    return n.to_bytes((n.bit_length() + 7) // 8, "big", signed=False)


# ──────────────────────────────────────────────────────────────────────────────
# Primitive encoders
# ──────────────────────────────────────────────────────────────────────────────


def encode_bool(value: Any) -> bytes:
    return b"\x01" if coerce_bool(value) else b"\x00"


def encode_uint(value: Any, *, bits: int = 256) -> bytes:
    mag = _minimal_be_unsigned(coerce_uint(value, bits=bits))
    return uvarint_encode(len(mag)) + mag


def encode_bytes(value: Any, *, fixed_len: int | None = None, max_len: int | None = None) -> bytes:
    b = coerce_bytes(value, fixed_len=fixed_len, max_len=max_len)
    if fixed_len is not None:
        # Fixed-sized "bytesN" have no explicit length prefix by convention.
        return b
    return uvarint_encode(len(b)) + b


def encode_address(value: Any) -> bytes:
    return coerce_address(value)


# ──────────────────────────────────────────────────────────────────────────────
# High-level dispatch
# ──────────────────────────────────────────────────────────────────────────────


def encode_value(value: Any, typ: TypeSpec) -> bytes:
    """Encode a single value according to the given ABI type (string or object)."""
    if isinstance(typ, str):
        typ = parse_type(typ)

    if isinstance(typ, BoolType):
        return encode_bool(value)
    if isinstance(typ, UIntType):
        return encode_uint(value, bits=typ.bits)
    if isinstance(typ, BytesType):
        return encode_bytes(
            value,
            fixed_len=typ.fixed_len,
            max_len=typ.max_len if typ.fixed_len is None else None,
        )
    if isinstance(typ, AddressType):
        return encode_address(value)
    if isinstance(typ, ArrayType):
        items = list(value) if not isinstance(value, (str, bytes, bytearray)) else None
        if items is None:
            raise ValidationError(f"{typ.name} expects a sequence")
        return uvarint_encode(len(items)) + b"".join(encode_value(v, typ.item) for v in items)

    raise ABITypeError(f"unsupported ABI type: {typ!r}")


def encode_args(types: Sequence[TypeSpec], values: Sequence[Any]) -> bytes:
    """
    Encode a sequence of arguments as:
        LEB128(count) || item1 || item2 || ... || itemN

    Raises ABITypeError or ValidationError on mismatch or invalid values.
    """
    if len(types) != len(values):
        raise ABITypeError(
            f"argument count mismatch: {len(values)} values for {len(types)} types"
        )
    out = bytearray(uvarint_encode(len(types)))
    for t, v in zip(types, values):
        out += encode_value(v, t)
    return bytes(out)


# ──────────────────────────────────────────────────────────────────────────────
# Function selectors
# ──────────────────────────────────────────────────────────────────────────────


def function_signature(name: str, types: Sequence[TypeSpec]) -> str:
    """Canonical text signature, e.g. ``claim(bytes32[],uint256)``."""
    if not isinstance(name, str) or not name.isidentifier():
        raise ABITypeError(f"invalid function name: {name!r}")
    names = [(parse_type(t) if isinstance(t, str) else t).name for t in types]
    return f"{name}({','.join(names)})"


def selector(name: str, types: Sequence[TypeSpec]) -> bytes:
    return keccak256(function_signature(name, types).encode("ascii"))[:SELECTOR_LEN]


def encode_call(name: str, types: Sequence[TypeSpec], values: Sequence[Any]) -> bytes:
    return selector(name, types) + encode_args(types, values)
