"""
qv_node/qv_runtime/cost.py

The quadratic pricing rule. N votes on one proposal cost N*N credits; there
is no other pricing input anywhere in the system.
"""

from __future__ import annotations

from typing import Mapping


def vote_cost(votes: int) -> int:
    return votes * votes


def credits_used(allocations: Mapping[str, int]) -> int:
    """Total spend across every proposal a voter currently backs."""
    return sum(vote_cost(v) for v in allocations.values())
