"""
Request-scoped accessors for the objects create_app() hangs on app.state.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import Request
from pydantic import BaseModel, ConfigDict

from qv_node.app_state.store import QVStore
from qv_node.qv_runtime.distribution import Distributor
from qv_node.qv_runtime.ledger import AllocationLedger


class CallerBody(BaseModel):
    """Base for gated request bodies; unknown keys (e.g. "from") are kept for the gate."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    address: str | None = None

    def raw(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def get_store(request: Request) -> QVStore:
    return request.app.state.store


def get_ledger(request: Request) -> AllocationLedger:
    return request.app.state.ledger


def get_distributor(request: Request) -> Distributor:
    return request.app.state.distributor


def get_whitelist(request: Request) -> Any:
    return request.app.state.whitelist


def get_config(request: Request) -> Dict[str, Any]:
    return request.app.state.config
