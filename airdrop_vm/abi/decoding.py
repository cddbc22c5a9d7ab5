"""
Inverse decoder for the calldata scheme in encoding.py.

Top-level:
- decode_value(buf, typ, offset=0, strict=True) -> (value, new_offset)
- decode_args(buf, types, offset=0, strict=True) -> (list, new_offset)
- split_call(data) -> (selector, args_bytes)
- decode_call(data, types) -> (selector, list)

`strict=True` enforces minimal encodings, width bounds and (for
decode_call) the absence of trailing bytes.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from .encoding import SELECTOR_LEN, TypeSpec
from .types import (
    ABITypeError,
    AddressType,
    ArrayType,
    ADDRESS_LEN,
    BoolType,
    BytesType,
    UIntType,
    ValidationError,
    parse_type,
)

__all__ = [
    "uvarint_decode",
    "decode_bool",
    "decode_uint",
    "decode_bytes",
    "decode_address",
    "decode_value",
    "decode_args",
    "split_call",
    "decode_call",
]

# A length prefix can never legitimately exceed this many LEB128 bytes.
_MAX_UVARINT_BYTES = 10


# ──────────────────────────────────────────────────────────────────────────────
# Varint (unsigned LEB128)
# ──────────────────────────────────────────────────────────────────────────────


def uvarint_decode(buf: bytes, offset: int = 0, *, strict: bool = True) -> Tuple[int, int]:
    """
    Decode unsigned LEB128 at buf[offset:].
    Returns (value, new_offset).
    """
    n = 0
    shift = 0
    i = offset
    while i < len(buf):
        b = buf[i]
        i += 1
        n |= (b & 0x7F) << shift
        if (b & 0x80) == 0:
            if strict and b == 0 and i - offset > 1:
                raise ValidationError("non-minimal uvarint")
            return n, i
        shift += 7
        if i - offset >= _MAX_UVARINT_BYTES:
            raise ValidationError("uvarint too large or malformed")
    raise ValidationError("truncated uvarint")


# ──────────────────────────────────────────────────────────────────────────────
# Primitive decoders
# ──────────────────────────────────────────────────────────────────────────────


def _read_exact(buf: bytes, offset: int, n: int) -> Tuple[bytes, int]:
    j = offset + n
    if j > len(buf):
        raise ValidationError("truncated payload")
    return bytes(buf[offset:j]), j


def _enforce_minimal_unsigned(mag: bytes) -> None:
    # minimal: 0 => b"\x00"; otherwise no leading zero
    if len(mag) == 0:
        raise ValidationError("empty magnitude")
    if len(mag) > 1 and mag[0] == 0x00:
        raise ValidationError("non-minimal unsigned magnitude")


def decode_bool(buf: bytes, offset: int = 0, *, strict: bool = True) -> Tuple[bool, int]:
    b, j = _read_exact(buf, offset, 1)
    if b[0] == 0x00:
        return False, j
    if b[0] == 0x01:
        return True, j
    if strict:
        raise ValidationError("invalid boolean value")
    return True, j


def decode_uint(buf: bytes, offset: int = 0, *, bits: int = 256, strict: bool = True) -> Tuple[int, int]:
    length, i = uvarint_decode(buf, offset, strict=strict)
    mag, j = _read_exact(buf, i, length)
    if strict:
        _enforce_minimal_unsigned(mag)
    v = int.from_bytes(mag, "big", signed=False)
    if v.bit_length() > bits:
        raise ValidationError(f"uint{bits} overflow")
    return v, j


def decode_bytes(
    buf: bytes,
    offset: int = 0,
    *,
    fixed_len: int | None = None,
    max_len: int | None = None,
    strict: bool = True,
) -> Tuple[bytes, int]:
    if fixed_len is not None:
        return _read_exact(buf, offset, fixed_len)
    length, i = uvarint_decode(buf, offset, strict=strict)
    if max_len is not None and strict and length > max_len:
        raise ValidationError("bytes length exceeds max_len")
    return _read_exact(buf, i, length)


def decode_address(buf: bytes, offset: int = 0) -> Tuple[bytes, int]:
    return _read_exact(buf, offset, ADDRESS_LEN)


# ──────────────────────────────────────────────────────────────────────────────
# High-level dispatch
# ──────────────────────────────────────────────────────────────────────────────


def decode_value(buf: bytes, typ: TypeSpec, offset: int = 0, *, strict: bool = True) -> Tuple[Any, int]:
    """
    Decode a single value of the given ABI type from buf[offset:].
    Returns (value, new_offset).
    """
    if isinstance(typ, str):
        typ = parse_type(typ)

    if isinstance(typ, BoolType):
        return decode_bool(buf, offset, strict=strict)
    if isinstance(typ, UIntType):
        return decode_uint(buf, offset, bits=typ.bits, strict=strict)
    if isinstance(typ, BytesType):
        return decode_bytes(
            buf,
            offset,
            fixed_len=typ.fixed_len,
            max_len=(typ.max_len if typ.fixed_len is None else None),
            strict=strict,
        )
    if isinstance(typ, AddressType):
        return decode_address(buf, offset)
    if isinstance(typ, ArrayType):
        count, i = uvarint_decode(buf, offset, strict=strict)
        # Every item takes at least one byte; reject counts the buffer cannot hold.
        if count > len(buf) - i:
            raise ValidationError("array count exceeds payload")
        items: List[Any] = []
        for _ in range(count):
            v, i = decode_value(buf, typ.item, i, strict=strict)
            items.append(v)
        return items, i

    raise ABITypeError(f"unsupported ABI type: {typ!r}")


def decode_args(
    buf: bytes,
    types: Sequence[TypeSpec],
    offset: int = 0,
    *,
    strict: bool = True,
) -> Tuple[List[Any], int]:
    """
    Decode a sequence of arguments encoded as:
        LEB128(count) || item1 || item2 || ... || itemN
    Returns (list_of_values, new_offset).
    """
    count, i = uvarint_decode(buf, offset, strict=strict)
    if count != len(types):
        raise ABITypeError(f"argument count mismatch: encoded={count} expected={len(types)}")
    out: List[Any] = []
    for t in types:
        v, i = decode_value(buf, t, i, strict=strict)
        out.append(v)
    return out, i


def split_call(data: bytes) -> Tuple[bytes, bytes]:
    """Split calldata into (selector, encoded args)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValidationError("calldata must be bytes")
    data = bytes(data)
    if len(data) < SELECTOR_LEN:
        raise ValidationError("calldata shorter than a selector")
    return data[:SELECTOR_LEN], data[SELECTOR_LEN:]


def decode_call(data: bytes, types: Sequence[TypeSpec], *, strict: bool = True) -> Tuple[bytes, List[Any]]:
    sel, body = split_call(data)
    values, end = decode_args(body, types, strict=strict)
    if strict and end != len(body):
        raise ValidationError("trailing bytes after arguments", context={"extra": len(body) - end})
    return sel, values
