"""
qv_node/qv_runtime/distribution.py
----------------------------------

Funding-pool payout for a proposal.

The pool (a decimal string) is converted to wei and split in integer
arithmetic:

    fee    = pool * fee_percent // 100
    payout = pool - fee

so ``fee + payout == pool`` always. The fee goes to the treasury first,
then the payout to the recipient; each transfer blocks until confirmed.

Rules:
- A zero pool succeeds without any transfer and leaves the proposal
  ``active``.
- Only when both transfers confirm does the proposal become
  ``distributed`` with ``distribution_tx`` set to the payout reference.
- If the fee confirmed but the payout failed, the proposal stays
  ``active`` and ``fee_tx`` records the fee transfer. A later distribute
  call does not send the fee again.
- Payout is a flat transfer of the whole pool; vote totals do not weigh in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

from qv_node.app_state.store import ACTIVE, DISTRIBUTED, QVStore
from qv_node.qv_runtime.errors import ExternalTransferFailure, InvalidInput, ProposalNotActive, QVError
from qv_node.qv_runtime.units import format_amount, parse_amount

log = logging.getLogger(__name__)

DEFAULT_FEE_PERCENT = 5


class PaymentClient(Protocol):
    def transfer(self, to_address: str, amount: int) -> str:
        """Send ``amount`` wei to ``to_address``; return the tx reference once confirmed."""
        ...


def split_pool(pool: int, fee_percent: int = DEFAULT_FEE_PERCENT) -> Tuple[int, int]:
    if pool < 0:
        raise InvalidInput("Pool must be non-negative", code="invalid_amount")
    if not 0 <= fee_percent <= 100:
        raise InvalidInput("Fee percent must be within 0..100", code="invalid_fee")
    fee = pool * fee_percent // 100
    return fee, pool - fee


@dataclass(frozen=True)
class DistributionResult:
    proposal_id: str
    pool: int
    fee: int = 0
    payout: int = 0
    tx_hash: Optional[str] = None
    fee_tx: Optional[str] = None

    @property
    def transferred(self) -> bool:
        return self.tx_hash is not None

    def to_dict(self) -> Dict[str, Any]:
        if not self.transferred:
            return {"success": True, "message": "No funding pool to distribute"}
        return {
            "success": True,
            "payout": format_amount(self.payout),
            "fee": format_amount(self.fee),
            "txHash": self.tx_hash,
            "feeTxHash": self.fee_tx,
        }


class Distributor:
    def __init__(
        self,
        store: QVStore,
        payments: PaymentClient,
        treasury_address: str,
        fee_percent: int = DEFAULT_FEE_PERCENT,
    ):
        self.store = store
        self.payments = payments
        self.treasury_address = treasury_address
        self.fee_percent = int(fee_percent)

    def _send(self, to_address: str, amount: int, what: str) -> str:
        try:
            return self.payments.transfer(to_address, amount)
        except QVError:
            raise
        except Exception as exc:
            log.exception("%s transfer of %d wei to %s failed", what, amount, to_address)
            raise ExternalTransferFailure(f"{what} transfer failed: {exc}") from exc

    def distribute(self, proposal_id: str, recipient_address: Optional[str]) -> DistributionResult:
        proposal = self.store.get_proposal(proposal_id)
        recipient = (recipient_address or "").strip()
        if not recipient:
            raise InvalidInput("Recipient address required", code="recipient_required")

        # One distribution per proposal at a time.
        with self.store.proposal_lock(proposal_id):
            if proposal.status != ACTIVE:
                raise ProposalNotActive(f"Proposal already {proposal.status}: {proposal_id}")

            pool = parse_amount(proposal.funding_pool)
            if pool == 0:
                log.info("distribute proposal=%s: empty pool, nothing to send", proposal_id)
                return DistributionResult(proposal_id=proposal_id, pool=0)

            fee, payout = split_pool(pool, self.fee_percent)

            if proposal.fee_tx:
                log.info("distribute proposal=%s: fee already sent in %s", proposal_id, proposal.fee_tx)
            else:
                proposal.fee_tx = self._send(self.treasury_address, fee, "fee")

            tx_hash = self._send(recipient, payout, "payout")

            proposal.status = DISTRIBUTED
            proposal.distribution_tx = tx_hash

        log.info(
            "distributed proposal=%s pool=%s fee=%s payout=%s tx=%s",
            proposal_id, format_amount(pool), format_amount(fee), format_amount(payout), tx_hash,
        )
        return DistributionResult(
            proposal_id=proposal_id,
            pool=pool,
            fee=fee,
            payout=payout,
            tx_hash=tx_hash,
            fee_tx=proposal.fee_tx,
        )
