from __future__ import annotations

from typing import Any, Mapping, NoReturn, Optional

from airdrop_vm.errors import Revert


def _to_message(msg: Any) -> str:
    if isinstance(msg, (bytes, bytearray)):
        return bytes(msg).decode("utf-8", errors="replace")
    return str(msg)


def revert(message: Any = "revert", *, context: Optional[Mapping[str, Any]] = None) -> NoReturn:
    """Abort the current transaction with a reason string."""
    raise Revert(_to_message(message), context=dict(context or {}))


def require(
    condition: bool,
    message: Any = "require failed",
    *,
    context: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Assertion helper for contracts.

        abi.require(amount > 0, b"zero amount")
        abi.require(not ledger.is_claimed(index), b"already claimed")
    """
    if condition:
        return
    revert(message, context=context)


__all__ = ["require", "revert"]
