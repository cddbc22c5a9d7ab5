"""
airdrop_vm.runtime.gasmeter: deterministic gas metering with OOG semantics.

- Gas is charged *before* the metered operation runs.
- If the meter would exceed its limit, :class:`OutOfGas` is raised and the
  meter is left untouched.
- Snapshots/checkpoints support speculative execution.

The schedule only prices what the airdrop contracts care about: storage
reads/writes (distinguishing a fresh slot from an overwrite), hashing, events
and nested calls. That is enough to compare the per-claim cost of the mapping
and bitmap claim ledgers.

The host binds one meter per transaction with :func:`bind`; contract-facing
stdlib modules call :func:`charge`. Outside a transaction (off-chain tools,
unit tests of pure helpers) :func:`charge` is a no-op.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from airdrop_vm.errors import OutOfGas, VmError


@dataclass(frozen=True)
class GasSnapshot:
    used: int


@dataclass(frozen=True)
class GasSchedule:
    """Per-operation gas prices."""

    tx_base: int = 21_000
    sload: int = 2_100
    sstore_set: int = 20_000  # empty -> non-empty
    sstore_reset: int = 2_900  # non-empty -> anything
    keccak_base: int = 30
    keccak_word: int = 6
    log_base: int = 375
    call_base: int = 700

    def cost(self, op: str, words: int = 0) -> int:
        if op == "keccak":
            return self.keccak_base + self.keccak_word * words
        try:
            return int(getattr(self, op))
        except AttributeError:
            raise VmError(f"unknown gas op: {op}", code="gas_unknown_op") from None


DEFAULT_SCHEDULE = GasSchedule()


class GasMeter:
    """
    Deterministic gas meter.

    Typical usage:
        gm = GasMeter(limit=200_000)
        gm.consume(3)

    Notes:
    - All values are Python ints; negative or non-int inputs raise.
    - `used` is monotonically non-decreasing.
    - `remaining` never goes below zero; OOG is raised before that.
    """

    __slots__ = ("_limit", "_used")

    def __init__(self, *, limit: int) -> None:
        self._limit = self._require_int_ge(limit, 0, "limit")
        self._used = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def used(self) -> int:
        return self._used

    @property
    def remaining(self) -> int:
        return self._limit - self._used

    def consume(self, amount: int) -> None:
        """Charge `amount` gas; raise OutOfGas if this would exceed the limit."""
        amt = self._require_int_ge(amount, 0, "consume amount")
        new_used = self._used + amt
        if new_used > self._limit:
            raise OutOfGas(
                f"out of gas: need {amt} (used {self._used}, limit {self._limit})",
                context={"need": amt, "used": self._used, "limit": self._limit},
            )
        self._used = new_used

    def snapshot(self) -> GasSnapshot:
        return GasSnapshot(self._used)

    def restore(self, snap: GasSnapshot) -> None:
        if not isinstance(snap, GasSnapshot):
            raise VmError("invalid gas snapshot")
        self._used = self._require_int_ge(snap.used, 0, "snapshot.used")

    @contextmanager
    def checkpoint(self) -> Iterator["GasMeter"]:
        """Roll the meter back if the body raises; keep charges on success."""
        snap = self.snapshot()
        try:
            yield self
        except Exception:
            self.restore(snap)
            raise

    @staticmethod
    def _require_int_ge(v: int, lb: int, name: str) -> int:
        if not isinstance(v, int) or isinstance(v, bool):
            raise VmError(f"{name} must be int, got {type(v).__name__}")
        if v < lb:
            raise VmError(f"{name} must be >= {lb}, got {v}")
        return v

    def __repr__(self) -> str:  # pragma: no cover
        return f"GasMeter(limit={self._limit}, used={self._used})"


# --------------------------- active meter binding --------------------------- #

_active: Optional[Tuple[GasMeter, GasSchedule]] = None


def bind(meter: GasMeter, schedule: GasSchedule = DEFAULT_SCHEDULE) -> None:
    """Install the meter charged by contract-facing stdlib calls."""
    global _active
    _active = (meter, schedule)


def unbind() -> None:
    global _active
    _active = None


def active() -> Optional[GasMeter]:
    return _active[0] if _active is not None else None


def charge(op: str, words: int = 0) -> None:
    """Charge the bound meter for ``op``; no-op when nothing is bound."""
    if _active is None:
        return
    meter, schedule = _active
    meter.consume(schedule.cost(op, words))


__all__ = [
    "GasMeter",
    "GasSnapshot",
    "GasSchedule",
    "DEFAULT_SCHEDULE",
    "bind",
    "unbind",
    "active",
    "charge",
]
