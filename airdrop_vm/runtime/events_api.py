"""
airdrop_vm.runtime.events_api: validated, journaled event log.

Contracts emit ``(name: bytes, args: Mapping[str, bytes|int|bool])`` through
:mod:`airdrop_vm.stdlib.events`; the host records them here tagged with the
emitting contract address. The log supports checkpoints so a reverted
transaction leaves no events behind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from airdrop_vm.config import load_config
from airdrop_vm.errors import VmError

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ArgValue = Any  # constrained at runtime


@dataclass(frozen=True)
class Event:
    """An emitted event. ``tx_index`` is the position of the owning tx in the chain."""

    address: bytes
    name: bytes
    args: Dict[str, ArgValue]
    block_height: int = 0

    def to_dict(self) -> Dict[str, Any]:
        enc: Dict[str, Any] = {}
        for k, v in self.args.items():
            enc[k] = "0x" + v.hex() if isinstance(v, bytes) else v
        return {
            "address": "0x" + self.address.hex(),
            "name": self.name.decode("utf-8", errors="replace"),
            "args": enc,
            "block_height": self.block_height,
        }


def _invalid(msg: str, **ctx: Any) -> VmError:
    return VmError(msg, code="event_invalid", context=ctx)


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise _invalid("event name must be bytes", where="name_type")
    b = bytes(name)
    if len(b) == 0:
        raise _invalid("event name must be non-empty", where="name_empty")
    if len(b) > MAX_EVENT_NAME_BYTES:
        raise _invalid("event name too long", where="name_length", len=len(b))
    return b


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise _invalid("event key must be str", where="key_type")
    if not key or len(key) > MAX_KEY_LEN:
        raise _invalid("event key length out of range", where="key_length", len=len(key))
    if not _KEY_RE.match(key):
        raise _invalid("event key has invalid characters", where="key_grammar", key=key)
    return key


def _check_value(value: Any) -> ArgValue:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise _invalid("event bytes arg too long", where="value_bytes_length", len=len(b))
        return b
    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise _invalid("event int arg out of range", where="value_int_bits", bits=value.bit_length())
        return int(value)
    raise _invalid("unsupported event arg type", where="value_type", py_type=type(value).__name__)


class EventLog:
    """Append-only log with checkpoint/revert and a per-transaction cap."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._tx_start = 0

    def __len__(self) -> int:
        return len(self._events)

    def checkpoint(self) -> int:
        return len(self._events)

    def revert_to(self, marker: int) -> None:
        if marker < 0 or marker > len(self._events):
            raise VmError("invalid event checkpoint marker", context={"marker": marker})
        del self._events[marker:]

    def begin_tx(self) -> int:
        self._tx_start = len(self._events)
        return self._tx_start

    def emit(self, address: bytes, name: bytes, args: Mapping[Any, Any], *, block_height: int = 0) -> Event:
        bname = _check_name(name)
        if not isinstance(args, Mapping):
            raise _invalid("event args must be a mapping", where="args_type")
        cap = load_config().max_logs_per_tx
        if len(self._events) - self._tx_start >= cap:
            raise _invalid("too many events in transaction", where="log_cap", cap=cap)
        checked = {_check_key(k): _check_value(v) for k, v in args.items()}
        ev = Event(bytes(address), bname, checked, block_height)
        self._events.append(ev)
        return ev

    def since(self, marker: int) -> List[Event]:
        return list(self._events[marker:])

    def filter(self, address: Optional[bytes] = None, name: Optional[bytes] = None) -> List[Event]:
        out: Sequence[Event] = self._events
        if address is not None:
            out = [e for e in out if e.address == address]
        if name is not None:
            out = [e for e in out if e.name == name]
        return list(out)

    def clear(self) -> None:
        self._events.clear()
        self._tx_start = 0


# Sink used by contract code outside of a host (pure unit tests).
_sink = EventLog()


def set_sink(log: EventLog) -> EventLog:
    global _sink
    prev = _sink
    _sink = log
    return prev


def emit(address: bytes, name: bytes, args: Mapping[Any, Any], *, block_height: int = 0) -> Event:
    return _sink.emit(address, name, args, block_height=block_height)


def reset_events() -> None:
    """Test helper: install a fresh, empty sink."""
    set_sink(EventLog())


__all__ = [
    "Event",
    "EventLog",
    "set_sink",
    "emit",
    "reset_events",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
