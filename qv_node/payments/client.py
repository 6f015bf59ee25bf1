"""
Native-currency transfers from the treasury wallet.

Web3PaymentClient signs a plain value transfer with the treasury key,
broadcasts it over ``RPC_URL`` and blocks until the receipt arrives.
Reverted receipts and RPC errors surface as ExternalTransferFailure.
"""

import logging
from typing import Any, Dict, Optional

from web3 import Web3

from qv_node.config import get_treasury_private_key
from qv_node.qv_runtime.errors import ExternalTransferFailure, InvalidInput

logger = logging.getLogger(__name__)

TRANSFER_GAS = 21_000


class Web3PaymentClient:
    """Treasury wallet on an EVM chain."""

    def __init__(self, rpc_url: str, private_key: str, receipt_timeout_sec: float = 120.0):
        self.rpc_url = rpc_url
        self.w3 = Web3(Web3.HTTPProvider(rpc_url))
        self.account = self.w3.eth.account.from_key(private_key)
        self.receipt_timeout_sec = float(receipt_timeout_sec)

    @property
    def address(self) -> str:
        return self.account.address

    def _build_tx(self, to: str, amount: int) -> Dict[str, Any]:
        return {
            "to": to,
            "value": int(amount),
            "gas": TRANSFER_GAS,
            "gasPrice": self.w3.eth.gas_price,
            "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
            "chainId": self.w3.eth.chain_id,
        }

    def transfer(self, to_address: str, amount: int) -> str:
        if not Web3.is_address(to_address):
            raise InvalidInput(f"Not an EVM address: {to_address}", code="invalid_address")
        to = Web3.to_checksum_address(to_address)

        try:
            signed = self.account.sign_transaction(self._build_tx(to, amount))
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout_sec)
        except Exception as e:
            logger.error(f"Transfer of {amount} wei to {to} failed: {e}")
            raise ExternalTransferFailure(str(e)) from e

        ref = Web3.to_hex(tx_hash)
        if receipt.get("status") != 1:
            raise ExternalTransferFailure(f"Transaction {ref} reverted")
        logger.info(f"Transfer confirmed: {ref} ({amount} wei -> {to})")
        return ref


class UnconfiguredPaymentClient:
    """Stand-in when no treasury key is set; every transfer fails."""

    def transfer(self, to_address: str, amount: int) -> str:
        raise ExternalTransferFailure("TREASURY_PRIVATE_KEY is not set", code="payment_backend_unconfigured")


def build_payment_client(cfg: Dict[str, Any], private_key: Optional[str] = None):
    key = private_key if private_key is not None else get_treasury_private_key()
    if not key:
        logger.warning("TREASURY_PRIVATE_KEY not set; distributions with a non-zero pool will fail")
        return UnconfiguredPaymentClient()
    chain = cfg.get("chain", {})
    dist = cfg.get("distribution", {})
    return Web3PaymentClient(
        rpc_url=str(chain.get("rpc_url")),
        private_key=key,
        receipt_timeout_sec=float(dist.get("receipt_timeout_sec", 120)),
    )
