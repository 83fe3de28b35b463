"""Voucher marketplace - catalog search and stock-safe purchases"""

import asyncio
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from ewa_gateway.domain.exceptions import OutOfStockError, VoucherNotFoundError
from ewa_gateway.domain.models import (
    NotificationType,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
    Voucher,
    VoucherPurchase,
)
from ewa_gateway.domain.notifications import NotificationQueue
from ewa_gateway.domain.workflow import TransactionRecorder
from ewa_gateway.infrastructure.observability.logging import log_voucher_purchase
from ewa_gateway.infrastructure.observability.metrics import record_voucher_purchase

ALL_CATEGORIES = "all"


class VoucherIssuer(Protocol):
    """Issues the redeemable code for a purchased voucher"""

    async def issue(self, voucher: Voucher, now: datetime) -> VoucherPurchase: ...


def search_vouchers(
    catalog: Iterable[Voucher],
    category: Optional[str] = None,
    term: Optional[str] = None,
) -> List[Voucher]:
    """
    Filter the catalog by category and a case-insensitive search term.

    The term matches anywhere in the voucher name or provider. A category of
    None or "all" matches every voucher; one no voucher carries matches none.
    The catalog is not modified.
    """
    wanted = None if category in (None, ALL_CATEGORIES) else category
    needle = (term or "").strip().lower()

    return [
        v
        for v in catalog
        if (wanted is None or v.category == wanted)
        and (needle in v.name.lower() or needle in v.provider.lower())
    ]


class VoucherMarketplace:
    """
    Shared voucher catalog.

    Purchases against the same voucher are serialized with a per-voucher lock
    so the stock check, code issue, ledger write and decrement happen as one
    step. Different vouchers never wait on each other.
    """

    def __init__(
        self,
        catalog: Iterable[Voucher],
        issuer: VoucherIssuer,
        recorder: TransactionRecorder,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._catalog: Dict[str, Voucher] = {v.voucher_id: v for v in catalog}
        self._issuer = issuer
        self._recorder = recorder
        self._clock = clock
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def vouchers(self) -> List[Voucher]:
        return list(self._catalog.values())

    def search(self, category: Optional[str] = None, term: Optional[str] = None) -> List[Voucher]:
        return search_vouchers(self._catalog.values(), category, term)

    def get(self, voucher_id: str) -> Voucher:
        voucher = self._catalog.get(voucher_id)
        if voucher is None:
            raise VoucherNotFoundError(f"Voucher {voucher_id} not found")
        return voucher

    async def purchase(
        self,
        voucher_id: str,
        user: User,
        notifications: Optional[NotificationQueue] = None,
    ) -> Transaction:
        """
        Buy one unit of a voucher for the user.

        Raises:
            VoucherNotFoundError: unknown voucher id
            OutOfStockError: stock is 0 when the purchase gets the voucher lock
        """
        voucher = self.get(voucher_id)

        async with self._locks[voucher_id]:
            if voucher.stock == 0:
                record_voucher_purchase("out_of_stock")
                log_voucher_purchase(user.user_id, voucher_id, "out_of_stock", voucher.stock)
                if notifications is not None:
                    notifications.push(NotificationType.ERROR, f"{voucher.name} is out of stock.")
                raise OutOfStockError(f"Voucher {voucher_id} is out of stock")

            now = self._clock()
            receipt = await self._issuer.issue(voucher, now)
            transaction = Transaction(
                transaction_id=str(uuid.uuid4()),
                user_id=user.user_id,
                amount_cents=voucher.price_cents,
                fee_cents=0,
                type=TransactionType.VOUCHER,
                status=TransactionStatus.COMPLETED,
                created_at=now,
                payment_method=user.preferred_payment_method,
                voucher_details=receipt,
            )
            await self._recorder.record_transaction(transaction)
            voucher.stock -= 1

        record_voucher_purchase("completed")
        log_voucher_purchase(user.user_id, voucher_id, "completed", voucher.stock)
        if notifications is not None:
            notifications.push(
                NotificationType.SUCCESS,
                f"{voucher.name} purchased successfully! Check your email for the voucher code.",
            )
        return transaction

    def restock(self, voucher_id: str, quantity: int) -> Voucher:
        if quantity <= 0:
            raise ValueError("quantity must be > 0")
        voucher = self.get(voucher_id)
        voucher.stock += quantity
        return voucher
