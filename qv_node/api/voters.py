"""
qv_node/api/voters.py
---------------------

Voter endpoints:

- POST /voters                register (whitelisted)
- GET  /voters/{voter_id}     status, allocations, credits used / remaining
- POST /voters/{voter_id}/credits   top up (whitelisted)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from qv_node.api.deps import CallerBody, get_store, get_whitelist
from qv_node.app_state.store import QVStore
from qv_node.core.whitelist_gate import require_whitelisted
from qv_node.qv_runtime.tally import voter_view

log = logging.getLogger(__name__)

router = APIRouter(prefix="/voters", tags=["voters"])


class VoterCreate(CallerBody):
    voter_id: Optional[str] = Field(None, alias="voterId")
    # Validated by the store, not coerced here.
    initial_credits: Any = Field(None, alias="initialCredits")


class CreditTopUp(CallerBody):
    amount: Any = None


@router.post("")
def register_voter(
    payload: VoterCreate,
    store: QVStore = Depends(get_store),
    whitelist: Any = Depends(get_whitelist),
) -> Dict[str, Any]:
    require_whitelisted(whitelist, payload.raw(), action="register")
    voter = store.add_voter(payload.voter_id, payload.initial_credits)
    log.info("registered voter=%s credits=%d", voter.id, voter.credits)
    return {"success": True, "voter": voter.to_dict()}


@router.get("/{voter_id}")
def get_voter(voter_id: str, store: QVStore = Depends(get_store)) -> Dict[str, Any]:
    return voter_view(store, voter_id)


@router.post("/{voter_id}/credits")
def add_credits(
    voter_id: str,
    payload: CreditTopUp,
    store: QVStore = Depends(get_store),
    whitelist: Any = Depends(get_whitelist),
) -> Dict[str, Any]:
    require_whitelisted(whitelist, payload.raw(), action="add credits")
    balance = store.add_credits(voter_id, payload.amount)
    return {"success": True, "newBalance": balance}
