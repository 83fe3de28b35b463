"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import List, Literal, Optional

from ewa_gateway.domain.models import AuthOutcome, Notification, PaymentMethod, Transaction
from ewa_gateway.domain.workflow import WorkflowState
from ewa_gateway.infrastructure.clients.payloads import (
    EmployerPayload,
    TransactionPayload,
    UserPayload,
    VoucherPayload,
)


class LoginRequest(BaseModel):
    """Request body for POST /v1/session/login"""

    email: str = Field(..., min_length=3, description="Account email")
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """Response for POST /v1/session/login"""

    token: str
    is_admin: bool
    user: UserPayload
    employer: EmployerPayload


class SettingsUpdateRequest(BaseModel):
    """Request body for PATCH /v1/me/settings"""

    biometric_enabled: Optional[bool] = None
    preferred_payment_method: Optional[PaymentMethod] = None


class EarningsResponse(BaseModel):
    """Response for GET /v1/me/earnings"""

    period_start: date
    elapsed_days: int
    earned_cents: int
    available_cents: int
    next_payroll_date: date
    advance_cap: float


class QuoteRequest(BaseModel):
    """Request body for POST /v1/advances/quote"""

    amount_cents: int = Field(..., gt=0, description="Requested advance in cents")


class QuoteResponse(BaseModel):
    amount_cents: int
    fee_cents: int
    total_repayable_cents: int


class AdvanceRequest(BaseModel):
    """Request body for POST /v1/advances"""

    amount_cents: int = Field(..., description="Requested advance in cents")
    payment_method: Optional[PaymentMethod] = None
    step_up_outcome: Optional[AuthOutcome] = Field(
        None, description="Result of the on-device biometric check, when the user has it enabled"
    )


class TransactionResponse(TransactionPayload):
    total_cents: int

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            **TransactionPayload.from_domain(transaction).model_dump(),
            total_cents=transaction.total_cents,
        )


class AdvanceResponse(BaseModel):
    """Response for POST /v1/advances"""

    state: WorkflowState
    transaction: TransactionResponse


class TransactionListResponse(BaseModel):
    user_id: str
    transactions: List[TransactionResponse]


class VoucherListResponse(BaseModel):
    vouchers: List[VoucherPayload]


class RestockRequest(BaseModel):
    quantity: int = Field(..., gt=0)


class WellnessResponse(BaseModel):
    """Response for GET /v1/me/wellness"""

    score: int
    max_score: int
    percentage: float
    band: str
    tips: List[str]


class NotificationSchema(BaseModel):
    notification_id: str
    type: Literal["success", "error", "info", "warning"]
    message: str
    timestamp: float
    read: bool

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationSchema":
        return cls(
            notification_id=notification.notification_id,
            type=notification.type.value,
            message=notification.message,
            timestamp=notification.timestamp,
            read=notification.read,
        )


class NotificationListResponse(BaseModel):
    notifications: List[NotificationSchema]
