from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from qv_node.api import health, proposals, selftest, voters
from qv_node.app_state.store import QVStore
from qv_node.config import (
    get_cors_origins,
    get_default_credits,
    get_fee_percent,
    get_treasury_address,
    load_config,
)
from qv_node.payments.client import build_payment_client
from qv_node.qv_runtime.distribution import Distributor, PaymentClient
from qv_node.qv_runtime.errors import QVError
from qv_node.qv_runtime.ledger import AllocationLedger
from qv_node.whitelist.client import build_whitelist

log = logging.getLogger(__name__)


async def _qv_error_handler(request: Request, exc: QVError) -> JSONResponse:
    if exc.status_code >= 500:
        log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail()})


def create_app(
    cfg: Optional[Dict[str, Any]] = None,
    *,
    store: Optional[QVStore] = None,
    whitelist: Any = None,
    payments: Optional[PaymentClient] = None,
) -> FastAPI:
    cfg = cfg if cfg is not None else load_config(os.getcwd())

    app = FastAPI(title="Streaming Quadratic Voting API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(cfg),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = store if store is not None else QVStore(default_credits=get_default_credits(cfg))
    app.state.config = cfg
    app.state.store = store
    app.state.ledger = AllocationLedger(store)
    app.state.whitelist = whitelist if whitelist is not None else build_whitelist(cfg)
    app.state.distributor = Distributor(
        store,
        payments if payments is not None else build_payment_client(cfg),
        treasury_address=get_treasury_address(cfg),
        fee_percent=get_fee_percent(cfg),
    )

    app.add_exception_handler(QVError, _qv_error_handler)

    app.include_router(health.router)
    app.include_router(voters.router)
    app.include_router(proposals.router)
    app.include_router(selftest.router)

    return app
