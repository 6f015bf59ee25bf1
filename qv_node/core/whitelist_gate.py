"""
qv_node/core/whitelist_gate.py

Whitelist gating for state-changing endpoints.

Gated: register voter, add credits, create proposal, allocate, distribute.
Reads are never gated.

The caller address is taken from the first non-empty body field among
``address``, ``creator``, ``participant``, ``sender``, ``from``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from qv_node.qv_runtime.errors import Forbidden, InvalidInput

ADDRESS_FIELDS = ("address", "creator", "participant", "sender", "from")

FORBIDDEN_MESSAGE = "Invite-only. Tag @owockibot on X to request access."


def caller_address(body: Mapping[str, Any] | None) -> Optional[str]:
    for key in ADDRESS_FIELDS:
        value = (body or {}).get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def require_whitelisted(whitelist: Any, body: Mapping[str, Any] | None, *, action: str = "action") -> str:
    """
    Enforce that the calling address is on the allow-list.

    Returns the address on success. A missing address is InvalidInput
    (400), an unlisted one Forbidden (403).
    """
    addr = caller_address(body)
    if not addr:
        raise InvalidInput("Address required", code="address_required")
    if not whitelist.is_whitelisted(addr):
        raise Forbidden(f"{FORBIDDEN_MESSAGE} ({action})")
    return addr
