# qv_node/api/health.py
from __future__ import annotations

"""
Service index, agent docs and health for the voting node.

Routes
------
- GET /         human-oriented index of endpoints
- GET /agent    machine-readable description for LLM agents
- GET /health   liveness, registry sizes and whitelist source
"""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

from qv_node.api.deps import get_config, get_store, get_whitelist
from qv_node.app_state.store import QVStore
from qv_node.config import get_fee_percent, get_treasury_address

router = APIRouter(tags=["health"])

SERVICE_NAME = "Streaming Quadratic Voting"

ENDPOINTS = [
    ("POST", "/voters", "Register voter with initial credits", {"address": "0x...", "voterId": "optional", "initialCredits": 100}),
    ("GET", "/voters/:id", "Get voter status, allocations, remaining credits", None),
    ("POST", "/voters/:id/credits", "Add credits to voter", {"address": "0x...", "amount": 50}),
    ("POST", "/proposals", "Create a proposal", {"address": "0x...", "title": "string", "description": "optional", "fundingPool": "0.1"}),
    ("GET", "/proposals", "List all proposals with vote counts", None),
    ("GET", "/proposals/:id", "Get proposal details and voter allocations", None),
    ("POST", "/proposals/:id/allocate", "Allocate votes (adjustable anytime)", {"address": "0x...", "voterId": "string", "votes": 3}),
    ("POST", "/proposals/:id/distribute", "Distribute the funding pool", {"address": "0x...", "recipientAddress": "0x..."}),
]


@router.get("/")
def index() -> Dict[str, Any]:
    endpoints = {f"{m} {p}": d for m, p, d, _ in ENDPOINTS}
    endpoints["GET /health"] = "Health check"
    endpoints["GET /test/e2e"] = "End-to-end self test"
    return {
        "name": SERVICE_NAME,
        "description": "Continuous quadratic voting with adjustable streams",
        "endpoints": endpoints,
        "note": "Votes cost quadratically: 1 vote = 1 credit, 2 votes = 4 credits, 3 votes = 9 credits",
    }


@router.get("/health")
def health(store: QVStore = Depends(get_store), whitelist: Any = Depends(get_whitelist)) -> Dict[str, Any]:
    out: Dict[str, Any] = {"status": "ok", "timestamp": int(time.time() * 1000)}
    out.update(store.stats())
    out["whitelist"] = whitelist.status()
    return out


@router.get("/agent")
def agent_docs(cfg: Dict[str, Any] = Depends(get_config)) -> Dict[str, Any]:
    endpoints = []
    for method, path, desc, body in ENDPOINTS:
        entry: Dict[str, Any] = {"method": method, "path": path, "description": desc}
        if body:
            entry["body"] = body
        endpoints.append(entry)
    return {
        "name": SERVICE_NAME,
        "description": (
            "Continuous quadratic voting with adjustable streams. Voters allocate credits to proposals "
            "where cost scales quadratically (votes² = credits). Allocations can be adjusted anytime "
            "until distribution."
        ),
        "network": cfg.get("chain", {}).get("network", ""),
        "treasury_fee": f"{get_fee_percent(cfg)}%",
        "treasury_address": get_treasury_address(cfg),
        "endpoints": endpoints,
        "example_flow": [
            "1. POST /voters { address, initialCredits: 100 } -> get voterId",
            '2. POST /proposals { address, title: "Fund project X", fundingPool: "0.5" }',
            "3. POST /proposals/:id/allocate { address, voterId, votes: 5 } -> costs 25 credits (5²)",
            "4. Adjust: POST /proposals/:id/allocate { address, voterId, votes: 3 } -> now costs 9 credits",
            "5. POST /proposals/:id/distribute { address, recipientAddress } -> pays out the pool minus fee",
        ],
    }
