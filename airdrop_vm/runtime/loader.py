"""
airdrop_vm.runtime.loader: resolve contract modules and their exported ABI.

A contract is a plain Python module that:

  - imports its host surface from ``airdrop_vm.stdlib``;
  - defines module-level functions;
  - declares ``ABI: Dict[str, Tuple[str, ...]]`` mapping each externally
    callable function name to its argument type specs.

``init`` (if declared in ``ABI``) is the constructor: it is only reachable
through deployment. Every other exported name gets a 4-byte selector.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple, Union

from airdrop_vm.abi import encoding as abi_enc
from airdrop_vm.abi.types import ValidationError as ABIValidationError
from airdrop_vm.abi.types import parse_type
from airdrop_vm.errors import ValidationError
from airdrop_vm.runtime.hash_api import keccak256

log = logging.getLogger(__name__)

CONSTRUCTOR = "init"

ModuleLike = Union[str, ModuleType]


@dataclass(frozen=True)
class ContractModule:
    """A loaded contract module plus its parsed ABI."""

    name: str
    module: ModuleType
    abi: Mapping[str, Tuple[str, ...]]
    code_hash: bytes
    selectors: Dict[bytes, str] = field(default_factory=dict)

    def has(self, fn: str) -> bool:
        return fn in self.abi

    def types_of(self, fn: str) -> Tuple[str, ...]:
        try:
            return self.abi[fn]
        except KeyError:
            raise ValidationError(
                f"function not exported: {fn}",
                code="unknown_function",
                context={"contract": self.name, "function": fn},
            ) from None

    def resolve(self, fn: str) -> Callable[..., Any]:
        self.types_of(fn)
        func = getattr(self.module, fn, None)
        if not callable(func):
            raise ValidationError(
                f"exported function missing from module: {fn}",
                context={"contract": self.name, "function": fn},
            )
        return func

    def coerce_args(self, fn: str, args: Sequence[Any]) -> List[Any]:
        """Validate ``args`` against the declared types of ``fn``."""
        types = self.types_of(fn)
        if len(args) < len(types) and _trailing_defaults(self.resolve(fn)) >= len(types) - len(args):
            types = types[: len(args)]
        if len(types) != len(args):
            raise ValidationError(
                f"{fn} expects {len(types)} arguments, got {len(args)}",
                context={"contract": self.name, "function": fn},
            )
        try:
            return [parse_type(t).validate(a) for t, a in zip(types, args)]
        except ABIValidationError as e:
            raise ValidationError(f"{fn}: {e.message}", context={"function": fn}) from e

    def function_for_selector(self, sel: bytes) -> str:
        try:
            return self.selectors[bytes(sel)]
        except KeyError:
            raise ValidationError(
                "unknown selector",
                code="unknown_selector",
                context={"contract": self.name, "selector": bytes(sel).hex()},
            ) from None


def _trailing_defaults(func: Callable[..., Any]) -> int:
    """How many trailing positional parameters of ``func`` may be omitted."""
    n = 0
    for p in reversed(list(inspect.signature(func).parameters.values())):
        if p.kind not in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) or p.default is p.empty:
            break
        n += 1
    return n


def _import(target: ModuleLike) -> ModuleType:
    if isinstance(target, ModuleType):
        return target
    if isinstance(target, str):
        return importlib.import_module(target)
    raise ValidationError(f"cannot load contract from {type(target).__name__}")


def _code_hash(module: ModuleType) -> bytes:
    spec = getattr(module, "__spec__", None)
    loader = getattr(spec, "loader", None)
    get_source = getattr(loader, "get_source", None)
    src = get_source(module.__name__) if callable(get_source) else None
    return keccak256((src or module.__name__).encode("utf-8"))


def load_contract(target: ModuleLike) -> ContractModule:
    """Import ``target`` and validate its ``ABI`` declaration."""
    module = _import(target)
    raw_abi = getattr(module, "ABI", None)
    if not isinstance(raw_abi, Mapping) or not raw_abi:
        raise ValidationError(f"contract module {module.__name__} declares no ABI")

    parsed: Dict[str, Tuple[str, ...]] = {}
    selectors: Dict[bytes, str] = {}
    for fn, types in raw_abi.items():
        types = tuple(types)
        for t in types:
            parse_type(t)
        if not callable(getattr(module, fn, None)):
            raise ValidationError(f"ABI names missing function {fn} in {module.__name__}")
        parsed[fn] = types
        if fn == CONSTRUCTOR:
            continue
        sel = abi_enc.selector(fn, types)
        if sel in selectors:
            raise ValidationError(f"selector collision: {fn} vs {selectors[sel]}")
        selectors[sel] = fn

    cm = ContractModule(
        name=module.__name__,
        module=module,
        abi=parsed,
        code_hash=_code_hash(module),
        selectors=selectors,
    )
    log.debug("loaded contract %s (%d exports)", cm.name, len(parsed))
    return cm


__all__ = ["CONSTRUCTOR", "ContractModule", "load_contract"]
