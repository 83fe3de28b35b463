"""Voucher code issuing"""

import secrets
from datetime import datetime

from ewa_gateway.config import settings
from ewa_gateway.domain.models import Voucher, VoucherPurchase
from ewa_gateway.utils.date_utils import add_days


class LocalVoucherIssuer:
    """Generates provider-prefixed codes like VOD-123-456, valid for a fixed number of days"""

    def __init__(self, validity_days: int | None = None):
        self.validity_days = validity_days or settings.voucher_validity_days

    async def issue(self, voucher: Voucher, now: datetime) -> VoucherPurchase:
        prefix = "".join(ch for ch in voucher.provider.upper() if ch.isalpha())[:3] or "VCH"
        code = f"{prefix}-{secrets.randbelow(1000):03d}-{secrets.randbelow(1000):03d}"
        return VoucherPurchase(
            voucher_id=voucher.voucher_id,
            code=code,
            expiry_date=add_days(now.date(), self.validity_days),
        )
