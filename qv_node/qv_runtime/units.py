"""
qv_node/qv_runtime/units.py
---------------------------

Decimal-string <-> integer minor-unit conversion for funding pools.

Pools are quoted in the chain's native unit ("ether") and handled in wei
(18 decimals) so fee + payout always adds back up to the pool exactly.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from qv_node.qv_runtime.errors import InvalidInput

DECIMALS: int = 18
WEI_PER_UNIT: int = 10**DECIMALS


def parse_amount(value: str | int | None) -> int:
    """
    Parse a non-negative decimal amount ("0.5", "1", "0") into wei.

    None and "" count as zero. More than 18 fractional digits is rejected
    rather than rounded.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise InvalidInput("Amount must be a decimal string", code="invalid_amount")
    raw = str(value).strip()
    if not raw:
        return 0
    try:
        dec = Decimal(raw)
    except InvalidOperation:
        raise InvalidInput(f"Not a decimal amount: {raw!r}", code="invalid_amount") from None
    if not dec.is_finite() or dec < 0:
        raise InvalidInput(f"Amount must be a non-negative number: {raw!r}", code="invalid_amount")

    scaled = dec.scaleb(DECIMALS)
    if scaled != scaled.to_integral_value():
        raise InvalidInput(f"Too many decimal places (max {DECIMALS}): {raw!r}", code="invalid_amount")
    return int(scaled)


def format_amount(wei: int) -> str:
    """Inverse of parse_amount; always keeps one fractional digit ("1.0")."""
    wei = int(wei)
    sign = "-" if wei < 0 else ""
    whole, frac = divmod(abs(wei), WEI_PER_UNIT)
    frac_s = str(frac).rjust(DECIMALS, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{frac_s}"
