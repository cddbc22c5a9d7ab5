"""
airdrop_vm.errors: error hierarchy shared by the host runtime and contracts.

Every failure inside a transaction surfaces as a :class:`VmError` subclass.
The host reverts the whole transaction before re-raising, so callers only
ever see the error, never partial state.

    VmError
    ├── Revert             contract-level require()/revert() with a reason
    ├── OutOfGas           gas meter exhausted
    ├── ValidationError    bad host input (calldata, types, caps)
    ├── CallDepthExceeded  nested contract calls too deep
    └── ContextError       stdlib used outside of an execution frame
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class VmError(Exception):
    """
    Structured error used across the runtime.

    Supported call patterns:

        VmError("simple message")
        VmError("message", code="some_code", context={...})

    Attributes:
        code: short machine-readable code string
        message: human-readable message
        context: optional extra fields for debugging
    """

    default_code = "vm_error"

    def __init__(
        self,
        message: Any = "",
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if isinstance(message, (bytes, bytearray)):
            message = bytes(message).decode("utf-8", errors="replace")
        super().__init__(str(message))
        self.code: str = code or self.default_code
        self.message: str = str(message)
        self.context: Dict[str, Any] = dict(context or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class Revert(VmError):
    """Raised by ``abi.require``/``abi.revert``; ``reason`` is the short revert string."""

    default_code = "revert"

    @property
    def reason(self) -> str:
        return self.message


class OutOfGas(VmError):
    default_code = "out_of_gas"


class ValidationError(VmError):
    default_code = "validation_error"


class CallDepthExceeded(VmError):
    default_code = "call_depth_exceeded"


class ContextError(VmError):
    default_code = "context_error"


__all__ = [
    "VmError",
    "Revert",
    "OutOfGas",
    "ValidationError",
    "CallDepthExceeded",
    "ContextError",
]
