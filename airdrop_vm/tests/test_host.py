# -*- coding: utf-8 -*-
"""
LocalChain: deployment, atomic transactions, read-only calls, block height
and nested contract calls.
"""
from __future__ import annotations

import logging

import pytest

from airdrop_vm import LocalChain, Revert, ValidationError
from airdrop_vm.abi import encode_call
from airdrop_vm.errors import CallDepthExceeded
from airdrop_vm.runtime import context

COUNTER = "airdrop_vm.tests.counter_contract"


@pytest.fixture
def chain():
    return LocalChain()


@pytest.fixture
def alice(chain):
    return chain.account("alice")


@pytest.fixture
def counter(chain, alice):
    return chain.deploy(COUNTER, 5, sender=alice)


# ---------------------------- deployment ----------------------------------------


def test_deploy_runs_constructor(chain, counter, alice):
    assert chain.call(counter, "get") == 5
    assert chain.storage_of(counter)[b"owner"] == alice
    assert chain.is_contract(counter)


def test_constructor_defaults(chain, alice):
    c = chain.deploy(COUNTER, sender=alice)
    assert chain.call(c, "get") == 0


def test_deploy_addresses_follow_nonce(chain, alice):
    a = chain.deploy(COUNTER, sender=alice)
    b = chain.deploy(COUNTER, sender=alice)
    assert a != b
    assert chain.nonce_of(alice) == 2


def test_accounts_are_deterministic(chain):
    assert chain.account("bob") == LocalChain().account("bob")
    assert len(chain.account("bob")) == 20
    assert chain.account("bob") != chain.account("carol")


def test_init_not_callable_after_deploy(chain, counter, alice):
    with pytest.raises(ValidationError):
        chain.transact(counter, "init", 1, sender=alice)
    with pytest.raises(ValidationError):
        chain.call(counter, "init", 1)


def test_failed_deploy_leaves_no_contract(chain, alice):
    before = chain.state_snapshot()
    with pytest.raises(ValidationError):
        chain.deploy(COUNTER, "not-an-int", sender=alice)
    assert chain.state_snapshot() == before


# ---------------------------- transactions --------------------------------------


def test_transact_returns_receipt(chain, counter, alice):
    rcpt = chain.transact(counter, "inc", 2, sender=alice)
    assert rcpt.return_value == 7
    assert rcpt.event_names() == [b"Inc"]
    assert rcpt.events[0].args == {"by": 2, "count": 7}
    assert rcpt.gas_used > 21_000
    assert chain.receipts[-1] == rcpt


def test_automine_one_block_per_tx(chain, counter, alice):
    h = chain.height
    rcpt = chain.transact(counter, "inc", 1, sender=alice)
    assert rcpt.block_height == h + 1
    assert chain.height == h + 1
    assert chain.transact(counter, "height", sender=alice).return_value == h + 2


def test_mine_advances_height(chain):
    assert chain.mine(9) == 9
    assert chain.height == 9
    with pytest.raises(ValidationError):
        chain.mine(-1)


def test_revert_is_atomic(chain, counter, alice, caplog):
    chain.transact(counter, "inc", 1, sender=alice)
    before = chain.state_snapshot()
    n_receipts = len(chain.receipts)
    with caplog.at_level(logging.INFO, logger="airdrop_vm.runtime.host"):
        with pytest.raises(Revert) as ei:
            chain.transact(counter, "boom", 3, sender=alice)
    assert ei.value.reason == "boom"
    assert chain.state_snapshot() == before
    assert len(chain.receipts) == n_receipts
    assert chain.call(counter, "get") == 6
    assert "tx reverted" in caplog.text


def test_no_frame_leaks_after_revert(chain, counter, alice):
    with pytest.raises(Revert):
        chain.transact(counter, "boom", 1, sender=alice)
    assert not context.has_frame()


def test_unknown_function(chain, counter, alice):
    with pytest.raises(ValidationError):
        chain.transact(counter, "nope", sender=alice)


def test_strict_mode_coerces_arguments(chain, counter, alice):
    with pytest.raises(ValidationError):
        chain.transact(counter, "inc", -1, sender=alice)


def test_no_contract_at_address(chain, alice):
    with pytest.raises(ValidationError):
        chain.transact(b"\x01" * 20, "get", sender=alice)


# ---------------------------- raw calldata --------------------------------------


def test_transact_raw(chain, counter, alice):
    data = encode_call("inc", ("uint256",), [4])
    assert chain.decode_calldata(counter, data) == ("inc", [4])
    rcpt = chain.transact_raw(counter, data, sender=alice)
    assert rcpt.return_value == 9


def test_transact_raw_rejects_unknown_selector(chain, counter, alice):
    with pytest.raises(ValidationError):
        chain.transact_raw(counter, b"\xde\xad\xbe\xef\x00", sender=alice)


def test_transact_raw_rejects_trailing_bytes(chain, counter, alice):
    data = encode_call("inc", ("uint256",), [4]) + b"\x00"
    with pytest.raises(ValidationError):
        chain.transact_raw(counter, data, sender=alice)


# ---------------------------- read-only calls -----------------------------------


def test_call_discards_changes(chain, counter):
    before = chain.state_snapshot()
    assert chain.call(counter, "inc", 10) == 15
    assert chain.state_snapshot() == before
    assert chain.call(counter, "get") == 5


def test_call_default_sender_is_zero(chain, counter, alice):
    assert chain.call(counter, "whoami") == b"\x00" * 20
    assert chain.call(counter, "whoami", sender=alice) == alice


# ---------------------------- nested calls --------------------------------------


def test_nested_call_reads_target_storage(chain, counter, alice):
    proxy = chain.deploy(COUNTER, 100, sender=alice)
    assert chain.call(proxy, "forward_get", counter) == 5


def test_call_depth_limit(monkeypatch, alice):
    from airdrop_vm.config import load_config

    monkeypatch.setenv("AIRDROP_VM_MAX_CALL_DEPTH", "1")
    load_config.cache_clear()
    chain = LocalChain()
    a = chain.deploy(COUNTER, sender=alice)
    b = chain.deploy(COUNTER, sender=alice)
    with pytest.raises(CallDepthExceeded):
        chain.transact(a, "forward_get", b, sender=alice)


def test_gas_limit_enforced(monkeypatch, alice):
    from airdrop_vm.config import load_config
    from airdrop_vm.errors import OutOfGas

    monkeypatch.setenv("AIRDROP_VM_GAS_LIMIT", "30000")
    load_config.cache_clear()
    chain = LocalChain()
    with pytest.raises(OutOfGas):
        chain.deploy(COUNTER, 1, sender=alice)
    assert chain.state_snapshot()["storage"] == {}
