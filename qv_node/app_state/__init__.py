# qv_node/app_state/__init__.py
"""
qv_node app_state package
Provides the voter / proposal registries held for the process lifetime.
"""

from qv_node.app_state.store import Voter, Proposal, QVStore, ACTIVE, DISTRIBUTED

__all__ = ["Voter", "Proposal", "QVStore", "ACTIVE", "DISTRIBUTED"]
