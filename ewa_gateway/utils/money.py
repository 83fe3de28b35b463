"""Money formatting helpers (amounts are held as integer cents)"""

from decimal import Decimal


def format_rands(amount_cents: int) -> str:
    """50000 -> 'R500.00'"""
    return f"R{Decimal(amount_cents) / 100:.2f}"
