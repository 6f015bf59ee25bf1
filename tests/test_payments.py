# tests/test_payments.py

import pytest

from qv_node.payments.client import UnconfiguredPaymentClient, Web3PaymentClient, build_payment_client
from qv_node.qv_runtime.errors import ExternalTransferFailure, InvalidInput

DEV_KEY = "0x" + "11" * 32


def test_no_key_means_unconfigured():
    client = build_payment_client({}, private_key="")
    assert isinstance(client, UnconfiguredPaymentClient)
    with pytest.raises(ExternalTransferFailure) as excinfo:
        client.transfer("0x0000000000000000000000000000000000000001", 1)
    assert excinfo.value.code == "payment_backend_unconfigured"


def test_web3_client_rejects_bad_address():
    client = Web3PaymentClient("http://127.0.0.1:9", DEV_KEY)
    assert client.address.startswith("0x")
    with pytest.raises(InvalidInput):
        client.transfer("not-an-address", 1)


def test_web3_client_wraps_rpc_errors():
    client = Web3PaymentClient("http://127.0.0.1:9", DEV_KEY, receipt_timeout_sec=1)
    with pytest.raises(ExternalTransferFailure):
        client.transfer("0x0000000000000000000000000000000000000001", 1)
