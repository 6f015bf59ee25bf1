# qv_node/qv_runtime/__init__.py
"""
Quadratic voting runtime: cost rule, allocation ledger, tallies and
distribution. Nothing in here knows about HTTP.

Import submodules directly (qv_node.qv_runtime.ledger, ...). This package
stays import-free so app_state and the runtime can reference each other.
"""
