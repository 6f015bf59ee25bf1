"""
qv_node/qv_runtime/tally.py

Read-only views over the registries. Nothing here writes state.

Per-proposal totals come from the store's contributor index, so a detail
view costs O(contributors) rather than a scan of every voter.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from qv_node.app_state.store import Proposal, QVStore
from qv_node.qv_runtime.cost import credits_used, vote_cost


def voter_view(store: QVStore, voter_id: str) -> Dict[str, Any]:
    voter = store.get_voter(voter_id)
    with store.voter_lock(voter_id):
        out = voter.to_dict()
    used = credits_used(out["allocations"])
    out["creditsUsed"] = used
    out["creditsRemaining"] = out["credits"] - used
    return out


def _tally(store: QVStore, proposal_id: str) -> Tuple[int, int, List[Dict[str, Any]]]:
    total = 0
    items: List[Dict[str, Any]] = []
    for vid in store.contributors_of(proposal_id):
        voter = store.voters.get(vid)
        if voter is None:
            continue
        votes = voter.allocations.get(proposal_id, 0)
        if votes <= 0:
            continue
        total += votes
        items.append({"voterId": vid, "votes": votes, "creditsCost": vote_cost(votes)})
    return total, len(items), items


def proposal_summary(store: QVStore, proposal: Proposal) -> Dict[str, Any]:
    total, count, _ = _tally(store, proposal.id)
    out = proposal.to_dict()
    out["totalVotes"] = total
    out["voterCount"] = count
    return out


def list_proposals(store: QVStore) -> List[Dict[str, Any]]:
    return [proposal_summary(store, p) for p in store.iter_proposals()]


def proposal_detail(store: QVStore, proposal_id: str) -> Dict[str, Any]:
    proposal = store.get_proposal(proposal_id)
    total, count, items = _tally(store, proposal_id)
    out = proposal.to_dict()
    out["totalVotes"] = total
    out["voterCount"] = count
    out["allocations"] = items
    return out
