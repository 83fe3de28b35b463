"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

WELLNESS_MAX_SCORE = 850


class PaymentMethod(str, Enum):
    INSTANT = "instant"
    EFT = "eft"
    EWALLET = "ewallet"


class TransactionType(str, Enum):
    ADVANCE = "advance"
    REPAYMENT = "repayment"
    VOUCHER = "voucher"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    FAILED = "failed"


class VoucherCategory(str, Enum):
    MOBILE = "mobile"
    UTILITY = "utility"
    RETAIL = "retail"


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class AuthOutcome(str, Enum):
    """Result reported by a step-up authentication factor"""

    SUCCESS = "success"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


@dataclass(frozen=True)
class FeeStructure:
    """Employer advance fee policy: flat + percentage of amount, capped at max"""

    flat_cents: int
    percentage: float
    max_cents: int

    def __post_init__(self) -> None:
        if self.flat_cents < 0:
            raise ValueError("flat fee must be >= 0")
        if not 0 <= self.percentage <= 1:
            raise ValueError("fee percentage must be between 0 and 1")
        if self.max_cents < 0:
            raise ValueError("max fee must be >= 0")


@dataclass(frozen=True)
class Employer:
    """Employer and its earned-wage-access policy"""

    employer_id: str
    code: str
    name: str
    payroll_day: int  # day of month wages are disbursed
    advance_cap: float  # fraction of earned-to-date that may be advanced
    fee_structure: FeeStructure

    def __post_init__(self) -> None:
        if not 1 <= self.payroll_day <= 31:
            raise ValueError("payroll_day must be between 1 and 31")
        if not 0 <= self.advance_cap <= 1:
            raise ValueError("advance_cap must be between 0 and 1")


@dataclass(frozen=True)
class User:
    """Employee using the service"""

    user_id: str
    name: str
    email: str
    phone: str
    employer_id: str
    hourly_rate_cents: int
    start_date: date
    is_full_time: bool
    biometric_enabled: bool
    preferred_payment_method: PaymentMethod
    wellness_score: Optional[int] = None

    def __post_init__(self) -> None:
        if self.hourly_rate_cents <= 0:
            raise ValueError("hourly_rate_cents must be > 0")
        if self.wellness_score is not None and not 0 <= self.wellness_score <= WELLNESS_MAX_SCORE:
            raise ValueError(f"wellness_score must be between 0 and {WELLNESS_MAX_SCORE}")


@dataclass(frozen=True)
class VoucherPurchase:
    """Receipt embedded in a voucher transaction"""

    voucher_id: str
    code: str
    expiry_date: date


@dataclass(frozen=True)
class Transaction:
    """Ledger entry. Created complete, never edited afterwards."""

    transaction_id: str
    user_id: str
    amount_cents: int
    fee_cents: int
    type: TransactionType
    status: TransactionStatus
    created_at: datetime
    payment_method: PaymentMethod
    voucher_details: Optional[VoucherPurchase] = None

    @property
    def total_cents(self) -> int:
        return self.amount_cents + self.fee_cents


@dataclass
class Voucher:
    """Catalog entry. Stock is shared and decremented on purchase."""

    voucher_id: str
    category: VoucherCategory
    provider: str
    name: str
    face_value_cents: int
    price_cents: int
    discount_percent: int
    stock: int

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValueError("stock must be >= 0")


@dataclass
class Notification:
    """Ephemeral user-facing message"""

    notification_id: str
    type: NotificationType
    message: str
    timestamp: float
    expires_at: float
    read: bool = False


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User
    is_admin: bool = False


@dataclass(frozen=True)
class WellnessScore:
    score: int
    max_score: int = WELLNESS_MAX_SCORE
