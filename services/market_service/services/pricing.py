"""Checkout pricing policy shared by the cart summary and order creation.

All amounts are fen.
"""

from dataclasses import dataclass
from typing import Iterable

# ---------------------------------------------------------------------------
# Policy constants
# ---------------------------------------------------------------------------
DISCOUNT_THRESHOLD_FEN = 200_00
DISCOUNT_FEN = 20_00
DELIVERY_FEE_FEN = 8_00


@dataclass(frozen=True)
class CheckoutSummary:
    subtotal_fen: int
    discount_fen: int
    delivery_fee_fen: int
    total_fen: int


def summarize(lines: Iterable[tuple[int, int]]) -> CheckoutSummary:
    """Price ``(unit_price_fen, quantity)`` lines of the selected items."""
    lines = list(lines)
    subtotal = sum(price * quantity for price, quantity in lines)
    discount = DISCOUNT_FEN if subtotal >= DISCOUNT_THRESHOLD_FEN else 0
    delivery_fee = DELIVERY_FEE_FEN if lines else 0
    return CheckoutSummary(
        subtotal_fen=subtotal,
        discount_fen=discount,
        delivery_fee_fen=delivery_fee,
        total_fen=subtotal - discount + delivery_fee,
    )
