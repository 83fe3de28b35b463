"""Advance endpoints - earnings dashboard, fee quote and advance requests"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from ewa_gateway.api.dependencies import get_container, get_request_id, get_session
from ewa_gateway.api.v1.schemas import (
    AdvanceRequest,
    AdvanceResponse,
    EarningsResponse,
    QuoteRequest,
    QuoteResponse,
    TransactionResponse,
)
from ewa_gateway.container import ServiceContainer
from ewa_gateway.domain.earnings import earnings_summary
from ewa_gateway.domain.exceptions import (
    AmountExceedsCeilingError,
    AuthCancelledError,
    AuthFailedError,
    BackendUnavailableError,
    InvalidAmountError,
    WorkflowAlreadyActiveError,
)
from ewa_gateway.domain.fees import quote_advance
from ewa_gateway.infrastructure.clients.step_up import PresentedAssertionAuthenticator
from ewa_gateway.session import SessionContext

router = APIRouter()


@router.get("/me/earnings", response_model=EarningsResponse)
def get_earnings(
    session: SessionContext = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
):
    """Earned-to-date and the amount available to advance right now"""
    summary = earnings_summary(session.user, session.employer, container.clock(), container.policy)
    return EarningsResponse(
        period_start=summary.period_start,
        elapsed_days=summary.elapsed_days,
        earned_cents=summary.earned_cents,
        available_cents=summary.available_cents,
        next_payroll_date=summary.next_payroll_date,
        advance_cap=session.employer.advance_cap,
    )


@router.post("/advances/quote", response_model=QuoteResponse)
def get_quote(
    request_body: QuoteRequest,
    session: SessionContext = Depends(get_session),
):
    """Fee breakdown for an amount under the user's employer fee policy"""
    quote = quote_advance(request_body.amount_cents, session.employer.fee_structure)
    return QuoteResponse(
        amount_cents=quote.amount_cents,
        fee_cents=quote.fee_cents,
        total_repayable_cents=quote.total_repayable_cents,
    )


@router.post("/advances", response_model=AdvanceResponse)
async def request_advance(
    request_body: AdvanceRequest,
    request: Request,
    session: SessionContext = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
):
    """
    Request an advance against earned wages.

    Flow:
    1. Open a draft (refused while another request awaits step-up)
    2. Validate amount against the current ceiling
    3. If biometrics are enabled, apply the device-reported step-up outcome
    4. Record the completed advance transaction
    """
    request_id = get_request_id(request)
    authenticator = PresentedAssertionAuthenticator(request_body.step_up_outcome)

    try:
        workflow = container.start_advance(
            session,
            request_body.amount_cents,
            authenticator,
            payment_method=request_body.payment_method,
        )
        transaction = await workflow.submit()
        if transaction is None:
            transaction = await workflow.authorize()

    except WorkflowAlreadyActiveError as e:
        raise HTTPException(status_code=409, detail=str(e))

    except (InvalidAmountError, AmountExceedsCeilingError) as e:
        logging.warning(f"Advance rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except AuthCancelledError as e:
        raise HTTPException(status_code=409, detail=str(e))

    except AuthFailedError as e:
        logging.warning(f"Step-up failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=403, detail="Step-up authentication failed")

    except BackendUnavailableError as e:
        logging.error(f"Backend error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Backend service unavailable")

    session.add_transaction(transaction)
    return AdvanceResponse(
        state=workflow.state,
        transaction=TransactionResponse.from_transaction(transaction),
    )
