"""
qv_node/api/proposals.py
------------------------

Proposal endpoints:

- POST /proposals                        create (whitelisted)
- GET  /proposals                        list with totalVotes / voterCount
- GET  /proposals/{id}                   detail with per-voter allocations
- POST /proposals/{id}/allocate          set a voter's votes (whitelisted)
- POST /proposals/{id}/distribute        pay out the funding pool (whitelisted)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import Field

from qv_node.api.deps import CallerBody, get_distributor, get_ledger, get_store, get_whitelist
from qv_node.app_state.store import QVStore
from qv_node.core.whitelist_gate import require_whitelisted
from qv_node.qv_runtime.distribution import Distributor
from qv_node.qv_runtime.ledger import AllocationLedger
from qv_node.qv_runtime.tally import list_proposals, proposal_detail

router = APIRouter(prefix="/proposals", tags=["proposals"])


class ProposalCreate(CallerBody):
    title: Optional[str] = None
    description: Optional[str] = None
    funding_pool: Optional[Union[str, int, float]] = Field(None, alias="fundingPool")


class AllocateRequest(CallerBody):
    voter_id: Optional[str] = Field(None, alias="voterId")
    # Validated by the ledger, not coerced here.
    votes: Any = None


class DistributeRequest(CallerBody):
    recipient_address: Optional[str] = Field(None, alias="recipientAddress")


@router.post("")
def create_proposal(
    payload: ProposalCreate,
    store: QVStore = Depends(get_store),
    whitelist: Any = Depends(get_whitelist),
) -> Dict[str, Any]:
    require_whitelisted(whitelist, payload.raw(), action="create proposal")
    pool = None if payload.funding_pool is None else str(payload.funding_pool)
    proposal = store.create_proposal(payload.title, payload.description, pool)
    return {"success": True, "proposal": proposal.to_dict()}


@router.get("")
def get_proposals(store: QVStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return list_proposals(store)


@router.get("/{proposal_id}")
def get_proposal(proposal_id: str, store: QVStore = Depends(get_store)) -> Dict[str, Any]:
    return proposal_detail(store, proposal_id)


@router.post("/{proposal_id}/allocate")
def allocate_votes(
    proposal_id: str,
    payload: AllocateRequest,
    ledger: AllocationLedger = Depends(get_ledger),
    whitelist: Any = Depends(get_whitelist),
) -> Dict[str, Any]:
    require_whitelisted(whitelist, payload.raw(), action="allocate")
    return ledger.allocate(payload.voter_id or "", proposal_id, payload.votes).to_dict()


@router.post("/{proposal_id}/distribute")
def distribute_funds(
    proposal_id: str,
    payload: DistributeRequest,
    distributor: Distributor = Depends(get_distributor),
    whitelist: Any = Depends(get_whitelist),
) -> Dict[str, Any]:
    require_whitelisted(whitelist, payload.raw(), action="distribute")
    return distributor.distribute(proposal_id, payload.recipient_address).to_dict()
