"""Pydantic wire models shared by the backend client, mock backend and API responses"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ewa_gateway.domain.models import (
    WELLNESS_MAX_SCORE,
    Employer,
    FeeStructure,
    PaymentMethod,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
    Voucher,
    VoucherCategory,
    VoucherPurchase,
    WellnessScore,
)


class FeeStructurePayload(BaseModel):
    flat_cents: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=1)
    max_cents: int = Field(..., ge=0)


class EmployerPayload(BaseModel):
    employer_id: str
    code: str
    name: str
    payroll_day: int = Field(..., ge=1, le=31)
    advance_cap: float = Field(..., ge=0, le=1)
    fee_structure: FeeStructurePayload

    def to_domain(self) -> Employer:
        return Employer(
            employer_id=self.employer_id,
            code=self.code,
            name=self.name,
            payroll_day=self.payroll_day,
            advance_cap=self.advance_cap,
            fee_structure=FeeStructure(**self.fee_structure.model_dump()),
        )

    @classmethod
    def from_domain(cls, employer: Employer) -> "EmployerPayload":
        return cls(
            employer_id=employer.employer_id,
            code=employer.code,
            name=employer.name,
            payroll_day=employer.payroll_day,
            advance_cap=employer.advance_cap,
            fee_structure=FeeStructurePayload(
                flat_cents=employer.fee_structure.flat_cents,
                percentage=employer.fee_structure.percentage,
                max_cents=employer.fee_structure.max_cents,
            ),
        )


class UserPayload(BaseModel):
    user_id: str
    name: str
    email: str
    phone: str
    employer_id: str
    hourly_rate_cents: int = Field(..., gt=0)
    start_date: date
    is_full_time: bool
    biometric_enabled: bool
    preferred_payment_method: PaymentMethod
    wellness_score: Optional[int] = Field(None, ge=0, le=WELLNESS_MAX_SCORE)

    def to_domain(self) -> User:
        return User(**self.model_dump())

    @classmethod
    def from_domain(cls, user: User) -> "UserPayload":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            employer_id=user.employer_id,
            hourly_rate_cents=user.hourly_rate_cents,
            start_date=user.start_date,
            is_full_time=user.is_full_time,
            biometric_enabled=user.biometric_enabled,
            preferred_payment_method=user.preferred_payment_method,
            wellness_score=user.wellness_score,
        )


class VoucherPurchasePayload(BaseModel):
    voucher_id: str
    code: str
    expiry_date: date


class TransactionPayload(BaseModel):
    transaction_id: str
    user_id: str
    amount_cents: int
    fee_cents: int = Field(..., ge=0)
    type: TransactionType
    status: TransactionStatus
    created_at: datetime
    payment_method: PaymentMethod
    voucher_details: Optional[VoucherPurchasePayload] = None

    def to_domain(self) -> Transaction:
        details = None
        if self.voucher_details is not None:
            details = VoucherPurchase(**self.voucher_details.model_dump())
        return Transaction(
            transaction_id=self.transaction_id,
            user_id=self.user_id,
            amount_cents=self.amount_cents,
            fee_cents=self.fee_cents,
            type=self.type,
            status=self.status,
            created_at=self.created_at,
            payment_method=self.payment_method,
            voucher_details=details,
        )

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionPayload":
        details = None
        if transaction.voucher_details is not None:
            details = VoucherPurchasePayload(
                voucher_id=transaction.voucher_details.voucher_id,
                code=transaction.voucher_details.code,
                expiry_date=transaction.voucher_details.expiry_date,
            )
        return cls(
            transaction_id=transaction.transaction_id,
            user_id=transaction.user_id,
            amount_cents=transaction.amount_cents,
            fee_cents=transaction.fee_cents,
            type=transaction.type,
            status=transaction.status,
            created_at=transaction.created_at,
            payment_method=transaction.payment_method,
            voucher_details=details,
        )


class VoucherPayload(BaseModel):
    voucher_id: str
    category: VoucherCategory
    provider: str
    name: str
    face_value_cents: int
    price_cents: int
    discount_percent: int
    stock: int = Field(..., ge=0)

    def to_domain(self) -> Voucher:
        return Voucher(**self.model_dump())

    @classmethod
    def from_domain(cls, voucher: Voucher) -> "VoucherPayload":
        return cls(
            voucher_id=voucher.voucher_id,
            category=voucher.category,
            provider=voucher.provider,
            name=voucher.name,
            face_value_cents=voucher.face_value_cents,
            price_cents=voucher.price_cents,
            discount_percent=voucher.discount_percent,
            stock=voucher.stock,
        )


class WellnessScorePayload(BaseModel):
    score: int = Field(..., ge=0, le=WELLNESS_MAX_SCORE)
    max_score: int = WELLNESS_MAX_SCORE

    def to_domain(self) -> WellnessScore:
        return WellnessScore(score=self.score, max_score=self.max_score)


class LoginRequestPayload(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponsePayload(BaseModel):
    token: str
    user: UserPayload
    is_admin: bool = False
