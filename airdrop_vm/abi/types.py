"""
ABI types understood by the airdrop host.

Only the shapes the airdrop contracts exchange are supported::

    uint8 .. uint256   (``uint`` is an alias for ``uint256``)
    bytes1 .. bytes32  fixed width, raw on the wire
    bytes              length-prefixed
    bool
    address            20 raw bytes
    T[]                dynamic array of any of the above

Type objects coerce Python values (``validate``) and report their canonical
``name``; the byte layout lives in :mod:`airdrop_vm.abi.encoding` and
:mod:`airdrop_vm.abi.decoding`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from airdrop_vm import errors as _errors

__all__ = [
    "ABITypeError",
    "ValidationError",
    "ADDRESS_LEN",
    "normalize_hex",
    "coerce_bool",
    "coerce_uint",
    "coerce_bytes",
    "coerce_address",
    "UIntType",
    "BytesType",
    "BoolType",
    "AddressType",
    "ArrayType",
    "parse_type",
]

ADDRESS_LEN = 20
MAX_UINT_BITS = 256
MAX_FIXED_BYTES = 32


class ABITypeError(_errors.ValidationError, TypeError):
    """A type string (or a type/value count) the codec cannot handle."""

    default_code = "abi_type_error"


class ValidationError(_errors.ValidationError, ValueError):
    """A value or payload that does not fit its declared type."""

    default_code = "abi_invalid"


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def normalize_hex(s: str) -> bytes:
    if not isinstance(s, str) or not s.startswith("0x"):
        raise ValidationError("expected 0x-prefixed hex string")
    digits = s[2:]
    if len(digits) & 1:
        raise ValidationError("hex string must have an even number of digits")
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise ValidationError(f"invalid hex: {e}") from e


def coerce_bool(value: Any) -> bool:
    # 0/1 ints are accepted; any other int is ambiguous.
    if value is True or value is False:
        return value
    if type(value) is int and value in (0, 1):
        return value == 1
    raise ValidationError("bool must be True/False")


def coerce_uint(value: Any, *, bits: int = MAX_UINT_BITS) -> int:
    if not 0 < bits <= MAX_UINT_BITS:
        raise ABITypeError(f"bits must be in 1..{MAX_UINT_BITS}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("uint must be a Python int")
    if value < 0 or value.bit_length() > bits:
        raise ValidationError(f"uint{bits} out of range [0, {(1 << bits) - 1}]")
    return int(value)


def coerce_bytes(value: Any, *, fixed_len: Optional[int] = None, max_len: Optional[int] = None) -> bytes:
    """bytes-like or 0x-hex in; optional exact or maximum length."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
    elif isinstance(value, str) and value.startswith("0x"):
        raw = normalize_hex(value)
    else:
        raise ValidationError("bytes must be bytes, bytearray, or 0x-hex string")
    n = len(raw)
    if fixed_len is not None and n != fixed_len:
        raise ValidationError(f"bytes length must be exactly {fixed_len}, got {n}")
    if max_len is not None and n > max_len:
        raise ValidationError(f"bytes too long (max {max_len}, got {n})")
    return raw


def coerce_address(value: Any) -> bytes:
    try:
        return coerce_bytes(value, fixed_len=ADDRESS_LEN)
    except ValidationError as e:
        raise ValidationError(f"invalid address: {e.message}") from e


# ---------------------------------------------------------------------------
# Type objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UIntType:
    bits: int = MAX_UINT_BITS

    @property
    def name(self) -> str:
        return f"uint{self.bits}"

    def validate(self, value: Any) -> int:
        return coerce_uint(value, bits=self.bits)


@dataclass(frozen=True)
class BytesType:
    fixed_len: Optional[int] = None
    max_len: Optional[int] = None  # dynamic bytes only

    def __post_init__(self) -> None:
        if self.fixed_len is not None and self.fixed_len < 0:
            raise ABITypeError("fixed_len must be >= 0")
        if self.fixed_len is None and self.max_len is not None and self.max_len <= 0:
            raise ABITypeError("max_len must be > 0")

    @property
    def name(self) -> str:
        return "bytes" if self.fixed_len is None else f"bytes{self.fixed_len}"

    def validate(self, value: Any) -> bytes:
        return coerce_bytes(value, fixed_len=self.fixed_len, max_len=self.max_len)


@dataclass(frozen=True)
class BoolType:
    name = "bool"

    def validate(self, value: Any) -> bool:
        return coerce_bool(value)


@dataclass(frozen=True)
class AddressType:
    name = "address"

    def validate(self, value: Any) -> bytes:
        return coerce_address(value)


@dataclass(frozen=True)
class ArrayType:
    item: Any

    @property
    def name(self) -> str:
        return self.item.name + "[]"

    def validate(self, value: Any) -> list:
        if isinstance(value, (str, bytes, bytearray)) or not hasattr(value, "__iter__"):
            raise ValidationError(f"{self.name} expects a sequence")
        return [self.item.validate(v) for v in value]


# ---------------------------------------------------------------------------
# Type strings
# ---------------------------------------------------------------------------

_SIZED = re.compile(r"^(uint|bytes)(\d+)$")


def _sized_uint(bits: int) -> UIntType:
    if bits % 8 or not 8 <= bits <= MAX_UINT_BITS:
        raise ABITypeError(f"bit width must be a multiple of 8 in 8..{MAX_UINT_BITS}")
    return UIntType(bits=bits)


def _sized_bytes(n: int) -> BytesType:
    if not 1 <= n <= MAX_FIXED_BYTES:
        raise ABITypeError(f"bytesN length must be in 1..{MAX_FIXED_BYTES}")
    return BytesType(fixed_len=n)


_PLAIN: Dict[str, Callable[[], Any]] = {
    "bool": BoolType,
    "address": AddressType,
    "uint": UIntType,
    "bytes": BytesType,
}
_SIZED_CTORS: Dict[str, Callable[[int], Any]] = {"uint": _sized_uint, "bytes": _sized_bytes}


def parse_type(spec: str) -> Any:
    """Parse ``"uint256"``, ``"bytes32[]"``, ``"address"``… into a type object."""
    if not isinstance(spec, str) or not spec.strip():
        raise ABITypeError("type spec must be a non-empty string")
    s = spec.strip().lower()

    if s.endswith("[]"):
        return ArrayType(parse_type(s[:-2]))
    if s in _PLAIN:
        return _PLAIN[s]()
    m = _SIZED.match(s)
    if m is None:
        raise ABITypeError(f"unsupported type spec: {spec!r}")
    return _SIZED_CTORS[m.group(1)](int(m.group(2)))
