"""
qv_node/api/selftest.py

GET /test/e2e runs a short scenario against a throwaway store so the
live registries are never touched.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from fastapi import APIRouter

from qv_node.app_state.store import QVStore
from qv_node.qv_runtime.cost import vote_cost
from qv_node.qv_runtime.errors import InsufficientCredits, QVError
from qv_node.qv_runtime.ledger import AllocationLedger
from qv_node.qv_runtime.tally import proposal_detail

log = logging.getLogger(__name__)

router = APIRouter(prefix="/test", tags=["test"])


def run_self_test() -> Dict[str, Any]:
    results: Dict[str, Any] = {"tests": [], "passed": 0, "failed": 0}

    def check(name: str, fn: Callable[[], bool]) -> None:
        try:
            ok = bool(fn())
        except QVError as e:
            log.warning("self-test %r raised %s", name, e)
            ok = False
        results["tests"].append({"name": name, "passed": ok})
        results["passed" if ok else "failed"] += 1

    store = QVStore()
    ledger = AllocationLedger(store)

    v1 = store.add_voter("test-voter-1", 100)
    v2 = store.add_voter("test-voter-2", 100)
    check("Create voters", lambda: "test-voter-1" in store.voters and "test-voter-2" in store.voters)

    pid = store.create_proposal("Test Proposal").id
    check("Create proposal", lambda: pid in store.proposals)

    check("Allocate votes", lambda: ledger.allocate(v1.id, pid, 3).credits_cost == 9)
    check("Quadratic cost", lambda: vote_cost(3) == 9 and vote_cost(5) == 25)
    check("Second voter", lambda: ledger.allocate(v2.id, pid, 5).credits_remaining == 75)
    check("Adjust allocation", lambda: ledger.allocate(v1.id, pid, 2).credits_remaining == 96)
    check("Total votes", lambda: proposal_detail(store, pid)["totalVotes"] == 7)

    def over_budget() -> bool:
        try:
            ledger.allocate(v1.id, pid, 11)
        except InsufficientCredits as e:
            return e.available == 100 and e.required == 121
        return False

    check("Budget enforced", over_budget)

    store.remove_voter(v1.id)
    store.remove_voter(v2.id)
    store.remove_proposal(pid)
    check("Cleanup", lambda: not store.voters and not store.proposals and store.audit())

    return results


@router.get("/e2e")
def e2e() -> Dict[str, Any]:
    return run_self_test()
