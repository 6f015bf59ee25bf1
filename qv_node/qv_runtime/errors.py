"""
qv_node/qv_runtime/errors.py
----------------------------

Error taxonomy for the voting runtime.

Every error is local to one operation. The API layer maps ``status_code``
and ``detail()`` straight onto an HTTP response; nothing here is retried.
"""

from __future__ import annotations

from typing import Any, Dict


class QVError(Exception):
    """Base class for per-request failures."""

    status_code: int = 400
    code: str = "qv_error"

    def __init__(self, message: str = "", code: str | None = None):
        super().__init__(message or self.code)
        if code:
            self.code = code

    def detail(self) -> Dict[str, Any]:
        return {"error": self.code, "message": str(self)}


class NotFound(QVError):
    status_code = 404
    code = "not_found"


class InvalidInput(QVError):
    status_code = 400
    code = "invalid_input"


class VoterExists(InvalidInput):
    code = "voter_exists"


class InsufficientCredits(QVError):
    """Budget check failed; carries the figures a caller needs to retry smaller."""

    status_code = 400
    code = "insufficient_credits"

    def __init__(self, available: int, required: int):
        super().__init__(f"Insufficient credits: available={available} required={required}")
        self.available = int(available)
        self.required = int(required)

    def detail(self) -> Dict[str, Any]:
        out = super().detail()
        out["available"] = self.available
        out["required"] = self.required
        return out


class ProposalNotActive(QVError):
    status_code = 400
    code = "proposal_not_active"


class Forbidden(QVError):
    status_code = 403
    code = "forbidden"


class ExternalTransferFailure(QVError):
    status_code = 502
    code = "external_transfer_failure"
