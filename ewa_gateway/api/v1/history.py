"""Signed-in user's transaction history, wellness score and notifications"""

from fastapi import APIRouter, Depends

from ewa_gateway.api.dependencies import get_session
from ewa_gateway.api.v1.schemas import (
    NotificationListResponse,
    NotificationSchema,
    TransactionListResponse,
    TransactionResponse,
    WellnessResponse,
)
from ewa_gateway.domain.wellness import summarize_wellness
from ewa_gateway.session import SessionContext

router = APIRouter()


@router.get("/me/transactions", response_model=TransactionListResponse)
async def get_transaction_history(session: SessionContext = Depends(get_session)):
    """
    Retrieve the user's advances and voucher purchases.

    Returns:
        Transactions, most recent first
    """
    transactions = await session.refresh_transactions()
    ordered = sorted(transactions, key=lambda t: t.created_at, reverse=True)
    return TransactionListResponse(
        user_id=session.user_id,
        transactions=[TransactionResponse.from_transaction(t) for t in ordered],
    )


@router.get("/me/wellness", response_model=WellnessResponse)
async def get_wellness(session: SessionContext = Depends(get_session)):
    wellness = await session.backend.get_wellness_score(session.user_id)
    summary = summarize_wellness(wellness)
    return WellnessResponse(
        score=summary.score,
        max_score=summary.max_score,
        percentage=summary.percentage,
        band=summary.band,
        tips=summary.tips,
    )


@router.get("/me/notifications", response_model=NotificationListResponse)
def get_notifications(session: SessionContext = Depends(get_session)):
    return NotificationListResponse(
        notifications=[NotificationSchema.from_notification(n) for n in session.notifications.active()]
    )


@router.delete("/me/notifications/{notification_id}", status_code=204)
def dismiss_notification(notification_id: str, session: SessionContext = Depends(get_session)):
    """Dismiss a notification; unknown or already-expired ids are ignored"""
    session.notifications.remove(notification_id)
