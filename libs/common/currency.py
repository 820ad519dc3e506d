"""Currency conversion utilities for FarmDirect.

Internal storage unit: fen (smallest CNY unit, 100 fen = ¥1).
API / display unit: yuan (Decimal with two places, e.g. Decimal("69.90")).

Arithmetic on money (subtotals, discounts, refunds) happens in fen so
that sums never drift; conversion happens only at the API boundary.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

FEN_PER_YUAN: int = 100
_CENT = Decimal("0.01")


# ─── conversion helpers ───────────────────────────────────────────────────────


def yuan_to_fen(yuan: Union[Decimal, int, float, str]) -> int:
    """Convert yuan to fen (round half-up). ¥1 = 100 fen."""
    amount = Decimal(str(yuan)).quantize(_CENT, rounding=ROUND_HALF_UP)
    return int(amount * FEN_PER_YUAN)


def fen_to_yuan(fen: int) -> Decimal:
    """Convert fen to yuan with two decimal places. 100 fen = ¥1."""
    return (Decimal(fen) / FEN_PER_YUAN).quantize(_CENT)


def format_yuan(fen: int) -> str:
    """Render fen for human-facing messages, e.g. ``¥142.90``."""
    return f"¥{fen_to_yuan(fen)}"
