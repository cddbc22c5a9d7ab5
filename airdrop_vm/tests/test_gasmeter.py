from __future__ import annotations

import pytest

from airdrop_vm.errors import OutOfGas, VmError
from airdrop_vm.runtime import gasmeter
from airdrop_vm.runtime.gasmeter import DEFAULT_SCHEDULE, GasMeter, GasSchedule
from airdrop_vm.stdlib import storage


def test_consume_and_remaining():
    gm = GasMeter(limit=100)
    gm.consume(30)
    gm.consume(0)
    assert gm.used == 30
    assert gm.remaining == 70


def test_out_of_gas_leaves_meter_untouched():
    gm = GasMeter(limit=10)
    gm.consume(7)
    with pytest.raises(OutOfGas):
        gm.consume(4)
    assert gm.used == 7


@pytest.mark.parametrize("bad", [-1, 1.5, "3", True])
def test_consume_rejects_bad_amounts(bad):
    gm = GasMeter(limit=10)
    with pytest.raises(VmError):
        gm.consume(bad)


def test_checkpoint_restores_on_error():
    gm = GasMeter(limit=100)
    gm.consume(10)
    with pytest.raises(RuntimeError):
        with gm.checkpoint():
            gm.consume(50)
            raise RuntimeError("speculative path failed")
    assert gm.used == 10


def test_schedule_costs():
    s = DEFAULT_SCHEDULE
    assert s.cost("sload") == 2100
    assert s.cost("sstore_set") == 20000
    assert s.cost("sstore_reset") == 2900
    assert s.cost("keccak", 2) == 42
    with pytest.raises(VmError):
        s.cost("selfdestruct")


def test_charge_is_noop_when_unbound():
    assert gasmeter.active() is None
    gasmeter.charge("sstore_set")


def test_storage_write_prices_fresh_and_reset_slots():
    gm = GasMeter(limit=1_000_000)
    gasmeter.bind(gm)
    storage.set(b"k", b"\x01")
    assert gm.used == 20000
    storage.set(b"k", b"\x02")
    assert gm.used == 20000 + 2900
    assert storage.get(b"k") == b"\x02"
    assert gm.used == 20000 + 2900 + 2100


def test_custom_schedule():
    gm = GasMeter(limit=1_000)
    gasmeter.bind(gm, GasSchedule(sload=7))
    storage.get(b"k")
    assert gm.used == 7
