#!/usr/bin/env python3
"""
qv_node.app_state.store
-----------------------

In-memory voter and proposal registries for the voting node.

The store is an explicit object: the app builds one at startup and hands it
to every handler, tests build a fresh one each. Nothing here survives a
restart.

Besides the two registries it keeps:
- a contributor index (proposal id -> voter ids with a positive allocation),
  written only by the allocation ledger
- per-voter and per-proposal locks so read/check/write sequences on one
  voter or one proposal never interleave
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set

from qv_node.qv_runtime.cost import credits_used
from qv_node.qv_runtime.errors import InvalidInput, NotFound, VoterExists
from qv_node.qv_runtime.units import parse_amount

ACTIVE = "active"
DISTRIBUTED = "distributed"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class Voter:
    id: str
    credits: int
    allocations: Dict[str, int] = field(default_factory=dict)
    created_at: int = field(default_factory=_now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "credits": int(self.credits),
            "allocations": dict(self.allocations),
            "createdAt": self.created_at,
        }


@dataclass
class Proposal:
    id: str
    title: str
    description: str = ""
    funding_pool: str = "0"
    status: str = ACTIVE
    created_at: int = field(default_factory=_now_ms)
    distribution_tx: Optional[str] = None
    # Set when the fee left the treasury wallet but the payout did not.
    fee_tx: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "fundingPool": self.funding_pool,
            "status": self.status,
            "createdAt": self.created_at,
        }
        if self.distribution_tx:
            out["distributionTx"] = self.distribution_tx
        if self.fee_tx:
            out["feeTx"] = self.fee_tx
        return out


class QVStore:
    def __init__(self, default_credits: int = 100):
        self.default_credits = int(default_credits)
        self.voters: Dict[str, Voter] = {}
        self.proposals: Dict[str, Proposal] = {}
        # proposal id -> voter ids with votes > 0
        self.contributors: Dict[str, Set[str]] = {}
        # voter id -> registration order, so itemized views follow registry order
        self._voter_seq: Dict[str, int] = {}
        self._next_seq = 0

        self._guard = threading.Lock()
        self._voter_locks: Dict[str, threading.Lock] = {}
        self._proposal_locks: Dict[str, threading.Lock] = {}

    # ---------- Locks ----------
    def voter_lock(self, voter_id: str) -> threading.Lock:
        with self._guard:
            return self._voter_locks.setdefault(voter_id, threading.Lock())

    def proposal_lock(self, proposal_id: str) -> threading.Lock:
        with self._guard:
            return self._proposal_locks.setdefault(proposal_id, threading.Lock())

    # ---------- Voters ----------
    def add_voter(self, voter_id: Optional[str] = None, credits: Optional[int] = None) -> Voter:
        vid = str(voter_id).strip() if voter_id else ""
        vid = vid or str(uuid.uuid4())

        if credits is None:
            credits = self.default_credits
        if not _is_int(credits) or credits < 0:
            raise InvalidInput("Initial credits must be a non-negative integer", code="invalid_credits")

        with self._guard:
            if vid in self.voters:
                raise VoterExists(f"Voter already exists: {vid}")
            voter = Voter(id=vid, credits=int(credits))
            self.voters[vid] = voter
            self._voter_seq[vid] = self._next_seq
            self._next_seq += 1
        return voter

    def get_voter(self, voter_id: str) -> Voter:
        voter = self.voters.get(voter_id)
        if voter is None:
            raise NotFound(f"Voter not found: {voter_id}", code="voter_not_found")
        return voter

    def add_credits(self, voter_id: str, amount: Any) -> int:
        """Top up a voter's budget. Budgets only ever grow."""
        voter = self.get_voter(voter_id)
        if not _is_int(amount) or amount <= 0:
            raise InvalidInput("Positive integer amount required", code="invalid_amount")
        with self.voter_lock(voter_id):
            voter.credits += int(amount)
            return voter.credits

    def remove_voter(self, voter_id: str) -> None:
        """Cleanup path only; normal flow never deletes voters."""
        with self.voter_lock(voter_id):
            voter = self.voters.pop(voter_id, None)
            if voter is None:
                return
            with self._guard:
                for pid in voter.allocations:
                    self.contributors.get(pid, set()).discard(voter_id)
                self._voter_seq.pop(voter_id, None)
                self._voter_locks.pop(voter_id, None)

    def voter_order(self, voter_ids: Set[str]) -> List[str]:
        return sorted(voter_ids, key=lambda vid: self._voter_seq.get(vid, 0))

    # ---------- Proposals ----------
    def create_proposal(self, title: Optional[str], description: Optional[str] = None, funding_pool: Any = None) -> Proposal:
        title = (title or "").strip() if isinstance(title, str) else ""
        if not title:
            raise InvalidInput("Title required", code="title_required")

        pool = "0" if funding_pool in (None, "") else str(funding_pool).strip()
        # Validate now so distribution never meets an unparseable pool.
        parse_amount(pool)

        pid = str(uuid.uuid4())
        proposal = Proposal(id=pid, title=title, description=description or "", funding_pool=pool)
        with self._guard:
            self.proposals[pid] = proposal
            self.contributors[pid] = set()
        return proposal

    def get_proposal(self, proposal_id: str) -> Proposal:
        proposal = self.proposals.get(proposal_id)
        if proposal is None:
            raise NotFound(f"Proposal not found: {proposal_id}", code="proposal_not_found")
        return proposal

    def remove_proposal(self, proposal_id: str) -> None:
        """Cleanup path only."""
        with self._guard:
            self.proposals.pop(proposal_id, None)
            self.contributors.pop(proposal_id, None)
            self._proposal_locks.pop(proposal_id, None)

    def iter_proposals(self) -> Iterator[Proposal]:
        return iter(list(self.proposals.values()))

    # ---------- Contributor index ----------
    def index_set(self, proposal_id: str, voter_id: str, votes: int) -> None:
        with self._guard:
            members = self.contributors.setdefault(proposal_id, set())
            if votes > 0:
                members.add(voter_id)
            else:
                members.discard(voter_id)

    def contributors_of(self, proposal_id: str) -> List[str]:
        with self._guard:
            members = set(self.contributors.get(proposal_id, set()))
        return self.voter_order(members)

    # ---------- Audit ----------
    def audit(self) -> bool:
        """Integrity check: no stored zero allocations, no voter over budget."""
        for voter in list(self.voters.values()):
            with self.voter_lock(voter.id):
                allocations = dict(voter.allocations)
                credits = voter.credits
            if any(v <= 0 for v in allocations.values()):
                return False
            if credits_used(allocations) > credits:
                return False
        return True

    def stats(self) -> Dict[str, int]:
        return {"proposals": len(self.proposals), "voters": len(self.voters)}
