import os

import pytest

from airdrop_vm.config import load_config
from airdrop_vm.runtime import context, events_api, gasmeter, storage_api

# Keep dict/set hash-iteration stable. (CI may override but local runs benefit.)
os.environ.setdefault("PYTHONHASHSEED", "0")


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: longer property/simulation runs")


@pytest.fixture(autouse=True)
def _fresh_runtime(monkeypatch):
    """
    Every test starts with no active frame, an empty storage backend and event
    sink, no bound gas meter, and a config re-read from a clean environment.
    """
    for name in list(os.environ):
        if name.startswith("AIRDROP_VM_"):
            monkeypatch.delenv(name, raising=False)
    load_config.cache_clear()
    context.reset_frames()
    storage_api.reset_backend()
    events_api.reset_events()
    gasmeter.unbind()
    yield
    context.reset_frames()
    storage_api.reset_backend()
    events_api.reset_events()
    gasmeter.unbind()
    load_config.cache_clear()
