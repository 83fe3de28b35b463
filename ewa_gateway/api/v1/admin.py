"""Admin endpoints - employers, users, transactions and voucher stock"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ewa_gateway.api.dependencies import get_container, require_admin
from ewa_gateway.api.v1.schemas import RestockRequest, TransactionResponse, VoucherListResponse
from ewa_gateway.container import ServiceContainer
from ewa_gateway.domain.exceptions import VoucherNotFoundError
from ewa_gateway.infrastructure.clients.payloads import EmployerPayload, UserPayload, VoucherPayload
from ewa_gateway.session import SessionContext

router = APIRouter(prefix="/admin")


@router.get("/employers", response_model=List[EmployerPayload])
async def list_employers(
    admin: SessionContext = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    return [EmployerPayload.from_domain(e) for e in await container.backend.list_employers()]


@router.get("/users", response_model=List[UserPayload])
async def list_users(
    admin: SessionContext = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    return [UserPayload.from_domain(u) for u in await container.backend.list_users()]


@router.get("/transactions", response_model=List[TransactionResponse])
async def list_transactions(
    admin: SessionContext = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    transactions = await container.backend.list_transactions()
    return [TransactionResponse.from_transaction(t) for t in transactions]


@router.get("/vouchers", response_model=VoucherListResponse)
async def list_vouchers(
    admin: SessionContext = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    """Live catalog including current stock levels"""
    marketplace = await container.marketplace()
    return VoucherListResponse(vouchers=[VoucherPayload.from_domain(v) for v in marketplace.vouchers])


@router.post("/vouchers/{voucher_id}/restock", response_model=VoucherPayload)
async def restock_voucher(
    voucher_id: str,
    request_body: RestockRequest,
    admin: SessionContext = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    marketplace = await container.marketplace()
    try:
        voucher = marketplace.restock(voucher_id, request_body.quantity)
    except VoucherNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return VoucherPayload.from_domain(voucher)
