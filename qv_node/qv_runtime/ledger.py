"""
qv_node/qv_runtime/ledger.py
----------------------------

Allocation ledger for continuous quadratic voting.

A voter holds a credit budget and sets a vote count per proposal. Setting
``votes`` on a proposal *replaces* the previous count; it never adds to it.
The admission rule is therefore computed against the voter's spend on every
*other* proposal:

    other = credits_used(allocations) - vote_cost(current)
    admit iff other + vote_cost(votes) <= credits

Invariant after every successful write:

    sum(vote_cost(v) for v in allocations.values()) <= credits

Zero votes removes the entry; a stored allocation is always > 0.

``allocate`` is the only writer of ``Voter.allocations`` and of the store's
contributor index. The read/check/write runs under the voter's lock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from qv_node.app_state.store import ACTIVE, QVStore
from qv_node.qv_runtime.cost import credits_used, vote_cost
from qv_node.qv_runtime.errors import InsufficientCredits, InvalidInput, ProposalNotActive

log = logging.getLogger(__name__)

__all__ = ["AllocationLedger", "AllocationResult", "vote_cost", "credits_used"]


@dataclass(frozen=True)
class AllocationResult:
    proposal_id: str
    votes: int
    credits_cost: int
    credits_remaining: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "proposalId": self.proposal_id,
            "votes": self.votes,
            "creditsCost": self.credits_cost,
            "creditsRemaining": self.credits_remaining,
        }


def _check_votes(votes: Any) -> int:
    if votes is None:
        raise InvalidInput("Non-negative votes required", code="votes_required")
    if isinstance(votes, bool) or not isinstance(votes, int):
        raise InvalidInput("Votes must be an integer", code="invalid_votes")
    if votes < 0:
        raise InvalidInput("Non-negative votes required", code="invalid_votes")
    return votes


class AllocationLedger:
    def __init__(self, store: QVStore):
        self.store = store

    def allocate(self, voter_id: str, proposal_id: str, votes: Any) -> AllocationResult:
        """
        Set voter_id's vote count on proposal_id to ``votes``.

        Raises NotFound, ProposalNotActive, InvalidInput or
        InsufficientCredits; on any of these nothing is written.
        """
        proposal = self.store.get_proposal(proposal_id)
        if proposal.status != ACTIVE:
            raise ProposalNotActive(f"Proposal not active: {proposal_id}")
        if not voter_id:
            raise InvalidInput("Voter ID required", code="voter_id_required")
        votes = _check_votes(votes)
        voter = self.store.get_voter(voter_id)

        with self.store.voter_lock(voter_id):
            current = voter.allocations.get(proposal_id, 0)
            other = credits_used(voter.allocations) - vote_cost(current)
            cost = vote_cost(votes)

            if other + cost > voter.credits:
                log.info(
                    "allocate rejected voter=%s proposal=%s votes=%d available=%d required=%d",
                    voter_id, proposal_id, votes, voter.credits - other, cost,
                )
                raise InsufficientCredits(available=voter.credits - other, required=cost)

            if votes == 0:
                voter.allocations.pop(proposal_id, None)
            else:
                voter.allocations[proposal_id] = votes
            self.store.index_set(proposal_id, voter_id, votes)

            remaining = voter.credits - credits_used(voter.allocations)

        log.debug("allocate voter=%s proposal=%s votes=%d->%d remaining=%d", voter_id, proposal_id, current, votes, remaining)
        return AllocationResult(
            proposal_id=proposal_id,
            votes=votes,
            credits_cost=cost,
            credits_remaining=remaining,
        )
