# tests/test_ledger.py

import pytest

from qv_node.app_state.store import DISTRIBUTED
from qv_node.qv_runtime.cost import credits_used, vote_cost
from qv_node.qv_runtime.errors import (
    InsufficientCredits,
    InvalidInput,
    NotFound,
    ProposalNotActive,
)


# ============================================================
# Cost rule
# ============================================================

@pytest.mark.parametrize("votes,cost", [(0, 0), (1, 1), (2, 4), (3, 9), (5, 25), (10, 100)])
def test_vote_cost_is_square(votes, cost):
    assert vote_cost(votes) == cost


def test_credits_used_sums_squares():
    assert credits_used({"a": 2, "b": 3}) == 13
    assert credits_used({}) == 0


# ============================================================
# allocate
# ============================================================

def test_allocate_then_adjust_down(store, ledger):
    """
    100 credits, 5 votes -> cost 25, 75 left.
    Adjusting to 3 votes charges 9 in total, not 25 + 9.
    """
    store.add_voter("alice", 100)
    pid = store.create_proposal("Fund X").id

    first = ledger.allocate("alice", pid, 5)
    assert first.votes == 5
    assert first.credits_cost == 25
    assert first.credits_remaining == 75

    second = ledger.allocate("alice", pid, 3)
    assert second.credits_cost == 9
    assert second.credits_remaining == 91
    assert store.voters["alice"].allocations == {pid: 3}


def test_insufficient_credits_reports_available_and_required(store, ledger):
    store.add_voter("bob", 10)
    pid = store.create_proposal("Fund Y").id

    with pytest.raises(InsufficientCredits) as excinfo:
        ledger.allocate("bob", pid, 4)

    assert excinfo.value.available == 10
    assert excinfo.value.required == 16
    assert store.voters["bob"].allocations == {}


def test_available_excludes_the_proposal_being_changed(store, ledger):
    """Spend on other proposals counts; the old value on this one does not."""
    store.add_voter("carol", 30)
    p1 = store.create_proposal("One").id
    p2 = store.create_proposal("Two").id

    ledger.allocate("carol", p1, 4)  # 16
    ledger.allocate("carol", p2, 3)  # 9 -> 25 used

    # Raising p2 to 4 needs 16; other spend is 16, so only 14 available.
    with pytest.raises(InsufficientCredits) as excinfo:
        ledger.allocate("carol", p2, 4)
    assert excinfo.value.available == 14
    assert excinfo.value.required == 16

    # Original allocation untouched after the rejection.
    assert store.voters["carol"].allocations == {p1: 4, p2: 3}


def test_exact_budget_is_admitted(store, ledger):
    store.add_voter("dave", 25)
    pid = store.create_proposal("Edge").id
    res = ledger.allocate("dave", pid, 5)
    assert res.credits_remaining == 0


def test_same_allocation_twice_is_idempotent(store, ledger):
    store.add_voter("erin", 100)
    pid = store.create_proposal("Idem").id

    a = ledger.allocate("erin", pid, 4)
    snapshot = dict(store.voters["erin"].allocations)
    b = ledger.allocate("erin", pid, 4)

    assert a == b
    assert store.voters["erin"].allocations == snapshot


def test_zero_votes_removes_entry(store, ledger):
    store.add_voter("fay", 100)
    pid = store.create_proposal("Clear").id

    ledger.allocate("fay", pid, 6)
    res = ledger.allocate("fay", pid, 0)

    assert res.credits_cost == 0
    assert res.credits_remaining == 100
    assert pid not in store.voters["fay"].allocations
    assert store.contributors_of(pid) == []


def test_budget_invariant_holds_over_many_adjustments(store, ledger):
    store.add_voter("gus", 50)
    pids = [store.create_proposal(f"P{i}").id for i in range(4)]

    for step, votes in enumerate([7, 3, 5, 1, 6, 2, 0, 4, 7, 3, 3, 1]):
        pid = pids[step % len(pids)]
        try:
            ledger.allocate("gus", pid, votes)
        except InsufficientCredits:
            pass
        voter = store.voters["gus"]
        assert credits_used(voter.allocations) <= voter.credits
        assert all(v > 0 for v in voter.allocations.values())

    assert store.audit()


# ============================================================
# Error conditions
# ============================================================

def test_unknown_proposal(store, ledger):
    store.add_voter("hal", 100)
    with pytest.raises(NotFound):
        ledger.allocate("hal", "missing", 1)


def test_unknown_voter(store, ledger):
    pid = store.create_proposal("Nobody").id
    with pytest.raises(NotFound):
        ledger.allocate("ghost", pid, 1)


@pytest.mark.parametrize("votes", [None, -1, 1.5, True, "3"])
def test_bad_votes_rejected(store, ledger, votes):
    store.add_voter("ivy", 100)
    pid = store.create_proposal("Bad input").id
    with pytest.raises(InvalidInput):
        ledger.allocate("ivy", pid, votes)


def test_missing_voter_id(store, ledger):
    pid = store.create_proposal("Anon").id
    with pytest.raises(InvalidInput):
        ledger.allocate("", pid, 1)


def test_distributed_proposal_rejects_allocation(store, ledger):
    store.add_voter("jay", 100)
    proposal = store.create_proposal("Done")
    proposal.status = DISTRIBUTED

    with pytest.raises(ProposalNotActive):
        ledger.allocate("jay", proposal.id, 1)
