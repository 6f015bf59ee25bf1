"""
qv_node/app.py
--------------
Thin entrypoint for running the voting API via:

    uvicorn qv_node.app:app

All real route wiring lives in qv_node.qv_api.
"""

import os

from qv_node.config import configure_logging, load_config
from qv_node.qv_api import create_app

_cfg = load_config(os.getcwd())
configure_logging(_cfg)

app = create_app(_cfg)
