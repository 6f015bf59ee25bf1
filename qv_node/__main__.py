# qv_node/__main__.py
"""
Entry point for running the voting node as a module:
    python -m qv_node [--host 0.0.0.0] [--port 3000] [--config-dir .]
Env toggles:
  PORT / QV_HOST            -> bind address (overridden by flags)
  TREASURY_PRIVATE_KEY=...  -> enables on-chain payouts
  RPC_URL=...               -> chain endpoint for payouts
  QV_WHITELIST_ENABLED=0    -> open the whitelist gate (local dev only)
"""

from __future__ import annotations

import argparse
import os

import uvicorn

from .config import configure_logging, get_bind_host, get_bind_port, load_config
from .qv_api import create_app


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="qv-node",
        description="Run the streaming quadratic voting API",
    )
    p.add_argument("--host", default=None, help="Bind address (default: from config, 0.0.0.0)")
    p.add_argument("--port", type=int, default=None, help="HTTP port (default: from config, 3000)")
    p.add_argument(
        "--config-dir",
        default=os.getcwd(),
        help="Directory holding qv_config.yaml (default: cwd)",
    )
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    cfg = load_config(args.config_dir)
    configure_logging(cfg)

    host = args.host or get_bind_host(cfg)
    port = args.port or get_bind_port(cfg)

    app = create_app(cfg)
    print(f"Streaming QV running on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
