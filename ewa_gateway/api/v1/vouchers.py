"""Voucher marketplace endpoints"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ewa_gateway.api.dependencies import get_container, get_session
from ewa_gateway.api.v1.schemas import TransactionResponse, VoucherListResponse
from ewa_gateway.container import ServiceContainer
from ewa_gateway.domain.exceptions import BackendUnavailableError, OutOfStockError, VoucherNotFoundError
from ewa_gateway.infrastructure.clients.payloads import VoucherPayload
from ewa_gateway.session import SessionContext

router = APIRouter()


@router.get("/vouchers", response_model=VoucherListResponse)
async def list_vouchers(
    category: Literal["all", "mobile", "utility", "retail"] = Query("all"),
    q: Optional[str] = Query(None, description="Search by voucher name or provider"),
    session: SessionContext = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
):
    marketplace = await container.marketplace()
    return VoucherListResponse(
        vouchers=[VoucherPayload.from_domain(v) for v in marketplace.search(category, q)]
    )


@router.post("/vouchers/{voucher_id}/purchase", response_model=TransactionResponse)
async def purchase_voucher(
    voucher_id: str,
    session: SessionContext = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
):
    """
    Buy one voucher for the signed-in user.

    Returns:
        The completed voucher transaction with its issued code
    """
    marketplace = await container.marketplace()
    try:
        transaction = await marketplace.purchase(voucher_id, session.user, session.notifications)
    except VoucherNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OutOfStockError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BackendUnavailableError:
        raise HTTPException(status_code=503, detail="Backend service unavailable")

    session.add_transaction(transaction)
    return TransactionResponse.from_transaction(transaction)
