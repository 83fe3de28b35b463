"""In-memory backend backed by the demo fixture set"""

import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional

from ewa_gateway.domain.exceptions import EntityNotFoundError, InvalidCredentialsError
from ewa_gateway.domain.models import (
    Employer,
    FeeStructure,
    LoginResult,
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


def fixture_employers() -> List[Employer]:
    return [
        Employer("1", "TECH001", "TechCorp SA", 25, 0.25, FeeStructure(2_500, 0.01, 6_000)),
        Employer("2", "RETAIL99", "RetailHub", 30, 0.30, FeeStructure(2_000, 0.015, 5_000)),
        Employer("3", "HEALTH01", "HealthCare Plus", 15, 0.20, FeeStructure(3_000, 0.005, 7_000)),
    ]


def fixture_users() -> List[User]:
    return [
        User(
            user_id="1",
            name="Thabo Mbeki",
            email="thabo@example.com",
            phone="0821234567",
            employer_id="1",
            hourly_rate_cents=15_000,
            start_date=date(2023, 1, 15),
            is_full_time=True,
            biometric_enabled=True,
            preferred_payment_method=PaymentMethod.INSTANT,
            wellness_score=750,
        ),
        User(
            user_id="2",
            name="Sarah van der Merwe",
            email="sarah@example.com",
            phone="0827654321",
            employer_id="2",
            hourly_rate_cents=12_000,
            start_date=date(2023, 3, 1),
            is_full_time=True,
            biometric_enabled=False,
            preferred_payment_method=PaymentMethod.EFT,
            wellness_score=680,
        ),
    ]


def fixture_transactions() -> List[Transaction]:
    return [
        Transaction(
            transaction_id="1",
            user_id="1",
            amount_cents=50_000,
            fee_cents=3_000,
            type=TransactionType.ADVANCE,
            status=TransactionStatus.COMPLETED,
            created_at=datetime(2024, 1, 15),
            payment_method=PaymentMethod.INSTANT,
        ),
        Transaction(
            transaction_id="2",
            user_id="1",
            amount_cents=5_000,
            fee_cents=0,
            type=TransactionType.VOUCHER,
            status=TransactionStatus.COMPLETED,
            created_at=datetime(2024, 1, 20),
            payment_method=PaymentMethod.INSTANT,
            voucher_details=VoucherPurchase("1", "VOD-123-456", date(2024, 12, 31)),
        ),
    ]


def fixture_vouchers() -> List[Voucher]:
    mobile, utility, retail = VoucherCategory.MOBILE, VoucherCategory.UTILITY, VoucherCategory.RETAIL
    return [
        Voucher("1", mobile, "Vodacom", "R50 Airtime", 5_000, 4_800, 4, 100),
        Voucher("2", mobile, "MTN", "1GB Data Bundle", 10_000, 9_500, 5, 50),
        Voucher("3", mobile, "Telkom", "R100 Airtime", 10_000, 9_600, 4, 75),
        Voucher("4", utility, "Eskom", "R250 Electricity", 25_000, 25_000, 0, 200),
        Voucher("5", utility, "City Power", "R500 Prepaid", 50_000, 50_000, 0, 150),
        Voucher("6", retail, "Checkers", "R200 Grocery Voucher", 20_000, 19_000, 5, 80),
        Voucher("7", retail, "Pick n Pay", "R300 Shopping Voucher", 30_000, 28_500, 5, 60),
        Voucher("8", retail, "Woolworths", "R500 Gift Card", 50_000, 47_500, 5, 40),
    ]


class FixtureBackend:
    """
    Backend collaborator over in-memory fixtures.

    Used on its own for demos and tests, and as the fallback behind
    ResilientBackend when the real backend is unreachable.
    """

    def __init__(
        self,
        employers: Optional[List[Employer]] = None,
        users: Optional[List[User]] = None,
        transactions: Optional[List[Transaction]] = None,
        vouchers: Optional[List[Voucher]] = None,
    ):
        self._employers = {e.employer_id: e for e in (employers if employers is not None else fixture_employers())}
        self._users = {u.user_id: u for u in (users if users is not None else fixture_users())}
        self._transactions = list(transactions if transactions is not None else fixture_transactions())
        self._vouchers = list(vouchers if vouchers is not None else fixture_vouchers())

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Demo login: any non-empty password for a known email. Emails containing
        "admin" get the admin role; without a user record they sign in as the
        first fixture user.
        """
        if not password:
            raise InvalidCredentialsError("Password is required")

        is_admin = "admin" in email.lower()
        user = next((u for u in self._users.values() if u.email.lower() == email.lower()), None)
        if user is None and is_admin and self._users:
            user = next(iter(self._users.values()))
        if user is None:
            raise InvalidCredentialsError(f"Unknown account {email}")

        return LoginResult(token=f"fixture-{uuid.uuid4().hex}", user=user, is_admin=is_admin)

    async def get_user(self, user_id: str) -> User:
        try:
            return self._users[user_id]
        except KeyError:
            raise EntityNotFoundError(f"User {user_id} not found") from None

    async def list_users(self) -> List[User]:
        return list(self._users.values())

    async def get_employer(self, employer_id: str) -> Employer:
        try:
            return self._employers[employer_id]
        except KeyError:
            raise EntityNotFoundError(f"Employer {employer_id} not found") from None

    async def list_employers(self) -> List[Employer]:
        return list(self._employers.values())

    async def list_transactions(self, user_id: Optional[str] = None) -> List[Transaction]:
        return [t for t in self._transactions if user_id is None or t.user_id == user_id]

    async def list_vouchers(self, category: Optional[str] = None) -> List[Voucher]:
        # Copies, so catalog stock changes stay with the caller
        return [replace(v) for v in self._vouchers if category is None or v.category == category]

    async def record_transaction(self, transaction: Transaction) -> None:
        """Append to the ledger; a replayed write with a known transaction_id is a no-op"""
        if any(t.transaction_id == transaction.transaction_id for t in self._transactions):
            return
        self._transactions.append(transaction)

    async def get_wellness_score(self, user_id: str) -> WellnessScore:
        user = await self.get_user(user_id)
        return WellnessScore(score=user.wellness_score or 0)
