from __future__ import annotations

from typing import Any, Dict, Mapping

from airdrop_vm.runtime import context, events_api as _rt, gasmeter

Event = _rt.Event

__all__ = ["Event", "emit"]

_NO_ADDRESS = b"\x00" * 20


def _to_str_key(k: Any) -> str:
    """
    stdlib-facing keys may be bytes; runtime-facing keys must be str.
    """
    if isinstance(k, str):
        return k
    if isinstance(k, (bytes, bytearray)):
        try:
            return bytes(k).decode("ascii")
        except UnicodeDecodeError:
            return bytes(k).hex()
    return str(k)


def emit(name: bytes, args: Mapping[Any, Any]) -> None:
    """
    Contract-facing emit:

        emit(b"Claimed", {"account": sender, "index": 3})

    The event is tagged with the executing contract's address.
    """
    if not isinstance(name, (bytes, bytearray)):
        raise TypeError(f"event name must be bytes, got {type(name).__name__}")
    converted: Dict[str, Any] = {_to_str_key(k): v for k, v in args.items()}
    if context.has_frame():
        f = context.current_frame()
        address, height = f.address, f.block.height
    else:
        address, height = _NO_ADDRESS, 0
    gasmeter.charge("log_base")
    _rt.emit(address, bytes(name), converted, block_height=height)
