"""
airdrop_vm.runtime.host: an in-process chain that executes contract calls.

:class:`LocalChain` owns the persistent state (journaled storage, event log,
deployed contract table, account nonces, block height) and applies one
transaction at a time:

    chain = LocalChain()
    owner = chain.account("owner")
    drop = chain.deploy("airdrop_contracts.airdrop.mapping.contract", root, sender=owner)
    rcpt = chain.transact(drop, "claim", proof, 0, sender=alice)
    chain.call(drop, "is_claimed", 0)   # read-only

Every transaction opens a storage checkpoint, an event checkpoint and a fresh
gas meter. Any exception reverts all three (and the block height) before it
propagates, so a failed transaction leaves the chain exactly as it was.

With ``automine`` each successful transaction is sealed in its own block: the
transaction executes at ``height + 1``. :meth:`LocalChain.mine` advances the
height without transactions.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from airdrop_vm.abi import decoding as abi_dec
from airdrop_vm.abi.encoding import encode_call
from airdrop_vm.config import VMConfig, load_config
from airdrop_vm.errors import CallDepthExceeded, ValidationError
from airdrop_vm.runtime import context, events_api, gasmeter, storage_api
from airdrop_vm.runtime.context import BlockEnv, CallFrame, TxEnv, to_address
from airdrop_vm.runtime.events_api import Event, EventLog
from airdrop_vm.runtime.gasmeter import DEFAULT_SCHEDULE, GasMeter, GasSchedule
from airdrop_vm.runtime.hash_api import keccak256
from airdrop_vm.runtime.loader import CONSTRUCTOR, ContractModule, ModuleLike, load_contract
from airdrop_vm.runtime.storage_api import JournaledStore

log = logging.getLogger(__name__)

GENESIS_TIMESTAMP = 1_700_000_000
BLOCK_TIME = 12


@dataclass(frozen=True)
class Receipt:
    """Outcome of a successful transaction."""

    tx_hash: bytes
    block_height: int
    sender: bytes
    to: bytes
    function: str
    gas_used: int
    return_value: Any
    events: Tuple[Event, ...]

    def event_names(self) -> List[bytes]:
        return [e.name for e in self.events]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_hash": "0x" + self.tx_hash.hex(),
            "block_height": self.block_height,
            "sender": "0x" + self.sender.hex(),
            "to": "0x" + self.to.hex(),
            "function": self.function,
            "gas_used": self.gas_used,
            "events": [e.to_dict() for e in self.events],
        }


class LocalChain:
    """Single-process chain simulator hosting airdrop contracts."""

    def __init__(
        self,
        config: Optional[VMConfig] = None,
        *,
        schedule: GasSchedule = DEFAULT_SCHEDULE,
        genesis_timestamp: int = GENESIS_TIMESTAMP,
    ) -> None:
        self.config = config or load_config()
        self.schedule = schedule
        self._genesis_ts = genesis_timestamp
        self._store = JournaledStore()
        self._events = EventLog()
        self._contracts: Dict[bytes, ContractModule] = {}
        self._nonces: Dict[bytes, int] = {}
        self._receipts: List[Receipt] = []
        self._height = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Chain state
    # ------------------------------------------------------------------ #

    @property
    def height(self) -> int:
        return self._height

    @property
    def receipts(self) -> List[Receipt]:
        return list(self._receipts)

    def mine(self, n: int = 1) -> int:
        """Produce ``n`` empty blocks; returns the new height."""
        if not isinstance(n, int) or isinstance(n, bool) or n < 0:
            raise ValidationError("mine() expects a non-negative int")
        with self._lock:
            self._height += n
            log.debug("mined %d block(s), height=%d", n, self._height)
            return self._height

    def account(self, tag: Union[str, bytes]) -> bytes:
        """Deterministic externally owned account address for ``tag``."""
        raw = tag.encode("utf-8") if isinstance(tag, str) else bytes(tag)
        return keccak256(raw, domain=b"account")[12:]

    def nonce_of(self, address: bytes) -> int:
        return self._nonces.get(bytes(address), 0)

    def is_contract(self, address: bytes) -> bool:
        return bytes(address) in self._contracts

    def contract(self, address: bytes) -> ContractModule:
        try:
            return self._contracts[bytes(address)]
        except KeyError:
            raise ValidationError(
                "no contract at address", context={"address": "0x" + bytes(address).hex()}
            ) from None

    def events(self, address: Optional[bytes] = None, name: Optional[bytes] = None) -> List[Event]:
        return self._events.filter(address, name)

    def storage_of(self, address: bytes) -> Dict[bytes, bytes]:
        return dict(self._store.items(address))

    def state_snapshot(self) -> Dict[str, Any]:
        """Everything a transaction may touch; equal snapshots mean equal state."""
        return {
            "height": self._height,
            "storage": self._store.snapshot(),
            "events": len(self._events),
            "nonces": dict(self._nonces),
        }

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    def deploy(self, module: ModuleLike, *init_args: Any, sender: bytes) -> bytes:
        """Deploy a contract module; runs ``init(*init_args)`` when exported."""
        cm = load_contract(module)
        sender = to_address(sender)
        with self._lock:
            address = keccak256(sender + self.nonce_of(sender).to_bytes(8, "big"), domain=b"create")[12:]

            def run(frame: CallFrame) -> Any:
                self._contracts[address] = cm
                if cm.has(CONSTRUCTOR):
                    return self._invoke(frame, CONSTRUCTOR, init_args)
                if init_args:
                    raise ValidationError(f"{cm.name} has no constructor but got arguments")
                return None

            try:
                self._execute(sender, address, CONSTRUCTOR, b"", run)
            except Exception:
                self._contracts.pop(address, None)
                raise
            log.debug("deployed %s at 0x%s", cm.name, address.hex())
            return address

    def transact(self, address: bytes, fn: str, *args: Any, sender: bytes) -> Receipt:
        """Execute ``fn(*args)`` on ``address`` as a state-changing transaction."""
        to = to_address(address)
        cm = self.contract(to)
        if fn == CONSTRUCTOR:
            raise ValidationError("constructor is only callable on deploy")
        calldata = _encode_for(cm, fn, args)
        return self._execute(
            to_address(sender), to, fn, calldata, lambda f: self._invoke(f, fn, args)
        )

    def transact_raw(self, address: bytes, calldata: bytes, *, sender: bytes) -> Receipt:
        """Execute ``selector || args`` calldata as a transaction."""
        to = to_address(address)
        fn, args = self.decode_calldata(to, calldata)
        return self._execute(
            to_address(sender), to, fn, bytes(calldata), lambda f: self._invoke(f, fn, args)
        )

    def call(self, address: bytes, fn: str, *args: Any, sender: Optional[bytes] = None) -> Any:
        """Evaluate ``fn`` against current state and discard every change."""
        to = to_address(address)
        self.contract(to)
        if fn == CONSTRUCTOR:
            raise ValidationError("constructor is only callable on deploy")
        caller = to_address(sender) if sender is not None else b"\x00" * 20
        rcpt = self._execute(caller, to, fn, b"", lambda f: self._invoke(f, fn, args), read_only=True)
        return rcpt.return_value

    def decode_calldata(self, address: bytes, calldata: bytes) -> Tuple[str, List[Any]]:
        cm = self.contract(address)
        sel, _ = abi_dec.split_call(calldata)
        fn = cm.function_for_selector(sel)
        _, values = abi_dec.decode_call(calldata, cm.types_of(fn), strict=self.config.strict_mode)
        return fn, values

    # ------------------------------------------------------------------ #
    # Nested calls (contract -> contract)
    # ------------------------------------------------------------------ #

    def call_from_contract(self, target: bytes, fn: str, args: Sequence[Any]) -> Any:
        parent = context.current_frame()
        if fn == CONSTRUCTOR:
            raise ValidationError("constructor is only callable on deploy")
        if parent.depth + 1 >= self.config.max_call_depth:
            raise CallDepthExceeded(
                "max call depth exceeded", context={"depth": parent.depth + 1}
            )
        gasmeter.charge("call_base")
        return self._invoke(parent.nested(to_address(target)), fn, args)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _invoke(self, frame: CallFrame, fn: str, args: Sequence[Any]) -> Any:
        cm = self.contract(frame.address)
        func = cm.resolve(fn)
        values = cm.coerce_args(fn, args) if self.config.strict_mode else list(args)
        prev = storage_api.set_backend(self._store.view(frame.address))
        try:
            with context.frame(frame):
                return func(*values)
        finally:
            storage_api.set_backend(prev)

    def _execute(
        self,
        sender: bytes,
        to: bytes,
        fn: str,
        calldata: bytes,
        body: Callable[[CallFrame], Any],
        *,
        read_only: bool = False,
    ) -> Receipt:
        with self._lock:
            prev_height = self._height
            nonce = self.nonce_of(sender)
            if self.config.automine and not read_only:
                self._height += 1
            block = BlockEnv(
                height=self._height,
                timestamp=self._genesis_ts + self._height * BLOCK_TIME,
                chain_id=self.config.chain_id,
            )
            tx_hash = keccak256(
                sender + nonce.to_bytes(8, "big") + to + calldata + fn.encode("utf-8"),
                domain=b"tx",
            )
            tx = TxEnv(tx_hash=tx_hash, origin=sender, to=to, gas_limit=self.config.gas_limit, nonce=nonce)
            frame = CallFrame(address=to, caller=sender, block=block, tx=tx, depth=0, host=self)

            meter = GasMeter(limit=self.config.gas_limit)
            store_mark = self._store.checkpoint()
            ev_mark = self._events.checkpoint()
            self._events.begin_tx()
            prev_sink = events_api.set_sink(self._events)
            gasmeter.bind(meter, self.schedule)
            try:
                meter.consume(self.schedule.tx_base)
                result = body(frame)
            except Exception as exc:
                self._store.revert_to(store_mark)
                self._events.revert_to(ev_mark)
                self._height = prev_height
                if not read_only:
                    log.info(
                        "tx reverted: %s.%s from 0x%s: %s",
                        to.hex()[:8],
                        fn,
                        sender.hex()[:8],
                        getattr(exc, "message", exc),
                    )
                raise
            finally:
                gasmeter.unbind()
                events_api.set_sink(prev_sink)

            emitted = tuple(self._events.since(ev_mark))
            if read_only:
                self._store.revert_to(store_mark)
                self._events.revert_to(ev_mark)
            else:
                self._store.commit_to(store_mark)
                self._nonces[sender] = nonce + 1

            rcpt = Receipt(
                tx_hash=tx_hash,
                block_height=block.height,
                sender=sender,
                to=to,
                function=fn,
                gas_used=meter.used,
                return_value=result,
                events=emitted,
            )
            if not read_only:
                self._receipts.append(rcpt)
                log.debug("block %d: %s gas=%d", block.height, fn, meter.used)
            return rcpt


def _encode_for(cm: ContractModule, fn: str, args: Sequence[Any]) -> bytes:
    """Calldata for receipts/tx hashes; values are validated later by _invoke."""
    try:
        return encode_call(fn, cm.types_of(fn), list(args))
    except ValidationError:
        return fn.encode("utf-8")


__all__ = ["LocalChain", "Receipt", "GENESIS_TIMESTAMP", "BLOCK_TIME"]
