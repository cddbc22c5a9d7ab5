"""
airdrop_vm.runtime.storage_api: deterministic key/value storage for contracts.

Two layers live here:

1. :class:`JournaledStore`: the host-side state: per-address key/value maps
   with a stack of overlays. Writes go to the top overlay; reads consult the
   overlays from top to bottom and then the base. ``checkpoint()`` returns a
   marker; ``commit_to(marker)`` folds overlays down, ``revert_to(marker)``
   discards them. This is what gives every transaction all-or-nothing
   semantics.

2. The contract-facing primitives re-exported by :mod:`airdrop_vm.stdlib.storage`:

   - get(key) -> Optional[bytes]
   - set(key, value) -> None
   - delete(key) -> None
   - exists(key) -> bool
   - get_int(key) -> Optional[int]        # big-endian, unsigned
   - set_int(key, value) -> None          # big-endian, unsigned

   They operate on the currently installed backend. The host installs a
   :class:`AddressView` of the journaled store for the executing contract with
   :func:`set_backend` and restores the previous one when the frame exits.

Length caps come from :func:`airdrop_vm.config.load_config`. Gas is charged
by the stdlib wrapper, not here.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

from airdrop_vm.config import load_config
from airdrop_vm.errors import ValidationError, VmError


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise ValidationError(f"{name} must be bytes-like", context={"type": type(x).__name__})
    return bytes(x)


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for contract storage."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...


class _MemoryBackend:
    """Thread-safe in-memory backend for pure unit tests (no host)."""

    def __init__(self) -> None:
        self._store: Dict[bytes, bytes] = {}
        self._lock = threading.RLock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[key] = value

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return key in self._store


# =============================================================================
# Journaled multi-address store
# =============================================================================


@dataclass
class _Overlay:
    """
    One journal layer. ``None`` marks a deletion staged in this layer.
    """

    storage: Dict[bytes, Dict[bytes, Optional[bytes]]] = field(default_factory=dict)

    def lookup(self, addr: bytes, key: bytes) -> Tuple[bool, Optional[bytes]]:
        m = self.storage.get(addr)
        if m is None or key not in m:
            return False, None
        return True, m[key]

    def put(self, addr: bytes, key: bytes, value: Optional[bytes]) -> None:
        self.storage.setdefault(addr, {})[key] = value


class JournaledStore:
    """
    Copy-on-write contract storage with nested checkpoints.

        store = JournaledStore()
        mark = store.checkpoint()
        store.set(addr, b"k", b"v")
        store.revert_to(mark)     # or store.commit_to(mark)

    Markers are depths; ``checkpoint()`` returns the depth *before* the new
    overlay was pushed, so ``revert_to(marker)`` pops everything above it.
    """

    def __init__(self) -> None:
        self._base: Dict[bytes, Dict[bytes, bytes]] = {}
        self._layers: List[_Overlay] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Checkpointing
    # ------------------------------------------------------------------ #

    def depth(self) -> int:
        return len(self._layers)

    def checkpoint(self) -> int:
        with self._lock:
            marker = len(self._layers)
            self._layers.append(_Overlay())
            return marker

    def commit_to(self, marker: int) -> None:
        with self._lock:
            self._check_marker(marker)
            while len(self._layers) > marker:
                top = self._layers.pop()
                if self._layers:
                    self._merge(self._layers[-1], top)
                else:
                    self._apply_to_base(top)

    def revert_to(self, marker: int) -> None:
        with self._lock:
            self._check_marker(marker)
            del self._layers[marker:]

    def _check_marker(self, marker: int) -> None:
        if not isinstance(marker, int) or marker < 0 or marker > len(self._layers):
            raise VmError("invalid storage checkpoint marker", context={"marker": marker})

    @staticmethod
    def _merge(parent: _Overlay, child: _Overlay) -> None:
        for addr, m in child.storage.items():
            parent.storage.setdefault(addr, {}).update(m)

    def _apply_to_base(self, layer: _Overlay) -> None:
        for addr, m in layer.storage.items():
            base = self._base.setdefault(addr, {})
            for k, v in m.items():
                if v is None:
                    base.pop(k, None)
                else:
                    base[k] = v
            if not base:
                del self._base[addr]

    # ------------------------------------------------------------------ #
    # Storage API
    # ------------------------------------------------------------------ #

    def get(self, address: bytes, key: bytes) -> Optional[bytes]:
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        with self._lock:
            for layer in reversed(self._layers):
                found, value = layer.lookup(addr, key_b)
                if found:
                    return value
            return self._base.get(addr, {}).get(key_b)

    def set(self, address: bytes, key: bytes, value: bytes) -> None:
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        val_b = _b(value, name="value")
        with self._lock:
            if self._layers:
                self._layers[-1].put(addr, key_b, val_b)
            else:
                self._base.setdefault(addr, {})[key_b] = val_b

    def delete(self, address: bytes, key: bytes) -> None:
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        with self._lock:
            if self._layers:
                self._layers[-1].put(addr, key_b, None)
            else:
                m = self._base.get(addr)
                if m is not None:
                    m.pop(key_b, None)
                    if not m:
                        del self._base[addr]

    def exists(self, address: bytes, key: bytes) -> bool:
        return self.get(address, key) is not None

    def items(self, address: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """Visible (key, value) pairs for ``address`` in key order."""
        addr = _b(address, name="address")
        with self._lock:
            merged: Dict[bytes, Optional[bytes]] = dict(self._base.get(addr, {}))
            for layer in self._layers:
                merged.update(layer.storage.get(addr, {}))
            pairs = sorted((k, v) for k, v in merged.items() if v is not None)
        return iter(pairs)

    def snapshot(self) -> Dict[bytes, Dict[bytes, bytes]]:
        """Flattened copy of all visible state (tests compare these)."""
        with self._lock:
            addrs = {a for a in self._base}
            for layer in self._layers:
                addrs.update(layer.storage)
        out: Dict[bytes, Dict[bytes, bytes]] = {}
        for addr in sorted(addrs):
            m = dict(self.items(addr))
            if m:
                out[addr] = m
        return out

    def view(self, address: bytes) -> "AddressView":
        return AddressView(self, _b(address, name="address"))


class AddressView:
    """A :class:`StorageBackend` scoped to one contract address."""

    __slots__ = ("_store", "address")

    def __init__(self, store: JournaledStore, address: bytes) -> None:
        self._store = store
        self.address = address

    def get(self, key: bytes) -> Optional[bytes]:
        return self._store.get(self.address, key)

    def set(self, key: bytes, value: bytes) -> None:
        self._store.set(self.address, key, value)

    def delete(self, key: bytes) -> None:
        self._store.delete(self.address, key)

    def exists(self, key: bytes) -> bool:
        return self._store.exists(self.address, key)


# ---------------------------- backend binding ---------------------------- #

_backend: StorageBackend = _MemoryBackend()


def set_backend(backend: StorageBackend) -> StorageBackend:
    """Install ``backend`` and return the previously installed one."""
    global _backend
    for attr in ("get", "set", "delete", "exists"):
        if not callable(getattr(backend, attr, None)):
            raise VmError(f"backend missing method: {attr}")
    prev = _backend
    _backend = backend
    return prev


def reset_backend() -> None:
    """Restore a fresh in-memory backend (useful for tests)."""
    set_backend(_MemoryBackend())


# --------------------------- Validation helpers --------------------------- #


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise ValidationError("storage key must be bytes")
    if len(key) == 0:
        raise ValidationError("storage key must be non-empty")
    cap = load_config().max_storage_key_bytes
    if len(key) > cap:
        raise ValidationError(f"storage key too long (>{cap} bytes)", context={"len": len(key)})
    return bytes(key)


def _check_value(value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise ValidationError("storage value must be bytes")
    cap = load_config().max_storage_value_bytes
    if len(value) > cap:
        raise ValidationError(f"storage value too large (>{cap} bytes)", context={"len": len(value)})
    return bytes(value)


# --------------------------- Contract-facing API --------------------------- #


def get(key: bytes) -> Optional[bytes]:
    """Return the value for `key`, or None if not set."""
    return _backend.get(_check_key(key))


def set(key: bytes, value: bytes) -> None:  # noqa: A001
    """Set `key` to `value` (overwrites existing)."""
    _backend.set(_check_key(key), _check_value(value))


def delete(key: bytes) -> None:
    _backend.delete(_check_key(key))


def exists(key: bytes) -> bool:
    return _backend.exists(_check_key(key))


def get_int(key: bytes) -> Optional[int]:
    """Read an unsigned big-endian integer, or None if unset."""
    raw = get(key)
    if raw is None:
        return None
    return int.from_bytes(raw, "big")


def set_int(key: bytes, value: int) -> None:
    """Store ``value`` as minimal unsigned big-endian bytes (0 -> b"\\x00")."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError("set_int expects int")
    if value < 0:
        raise ValidationError("set_int expects non-negative int")
    length = max(1, (value.bit_length() + 7) // 8)
    set(key, value.to_bytes(length, "big"))


__all__ = [
    "StorageBackend",
    "JournaledStore",
    "AddressView",
    "set_backend",
    "reset_backend",
    "get",
    "set",
    "delete",
    "exists",
    "get_int",
    "set_int",
]
