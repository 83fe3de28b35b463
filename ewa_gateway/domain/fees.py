"""Advance fee calculation"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from ewa_gateway.domain.exceptions import InvalidAmountError
from ewa_gateway.domain.models import FeeStructure


@dataclass
class AdvanceQuote:
    """Fee breakdown shown before an advance is requested"""

    amount_cents: int
    fee_cents: int
    total_repayable_cents: int


def validate_amount(amount_cents: int) -> None:
    # bool is an int subclass; True is not a request for one cent
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise InvalidAmountError(f"Amount must be a whole number of cents, got {amount_cents!r}")
    if amount_cents <= 0:
        raise InvalidAmountError("Amount must be greater than zero")


def compute_fee(amount_cents: int, fee_structure: FeeStructure) -> int:
    """
    Fee for an advance: min(flat + amount x percentage, max).

    The percentage part is rounded half-up to the cent.

    Example:
        R500.00 at {flat R25, 1%, max R60} -> min(25 + 5, 60) = R30.00

    Raises:
        InvalidAmountError: amount is zero, negative or not an int
    """
    validate_amount(amount_cents)

    variable = (Decimal(amount_cents) * Decimal(str(fee_structure.percentage))).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    calculated = fee_structure.flat_cents + int(variable)
    return min(calculated, fee_structure.max_cents)


def quote_advance(amount_cents: int, fee_structure: FeeStructure) -> AdvanceQuote:
    fee = compute_fee(amount_cents, fee_structure)
    return AdvanceQuote(
        amount_cents=amount_cents,
        fee_cents=fee,
        total_repayable_cents=amount_cents + fee,
    )
