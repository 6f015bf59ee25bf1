import pytest
from fastapi.testclient import TestClient

from qv_node.app_state.store import QVStore
from qv_node.config import default_config
from qv_node.qv_api import create_app
from qv_node.qv_runtime.ledger import AllocationLedger
from qv_node.whitelist.client import StaticWhitelist

MEMBER = "0xAbC0000000000000000000000000000000000001"
OUTSIDER = "0x9990000000000000000000000000000000000009"


class FakePayments:
    """Records transfers; fail_on lists 1-based call numbers that should raise."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def transfer(self, to_address, amount):
        self.calls.append((to_address, amount))
        if len(self.calls) in self.fail_on:
            raise RuntimeError("rpc unavailable")
        return f"0xtx{len(self.calls)}"


@pytest.fixture
def store():
    """Fresh registries per test"""
    return QVStore(default_credits=100)


@pytest.fixture
def ledger(store):
    return AllocationLedger(store)


@pytest.fixture
def payments():
    return FakePayments()


@pytest.fixture
def app(store, payments):
    cfg = default_config()
    return create_app(cfg, store=store, whitelist=StaticWhitelist([MEMBER]), payments=payments)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
