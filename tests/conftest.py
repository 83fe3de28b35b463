"""Pytest fixtures for testing"""

import asyncio
import pytest
from datetime import date, datetime
from typing import Dict, List
from fastapi.testclient import TestClient
from ewa_gateway.api.main import create_app
from ewa_gateway.container import ServiceContainer
from ewa_gateway.domain.models import (
    AuthOutcome,
    Employer,
    FeeStructure,
    PaymentMethod,
    Transaction,
    User,
    Voucher,
    VoucherCategory,
    VoucherPurchase,
)
from ewa_gateway.domain.notifications import NotificationQueue
from ewa_gateway.infrastructure.clients.fixtures import FixtureBackend


# 11th of the month: 10 elapsed days in a calendar-month pay period
FIXED_NOW = datetime(2024, 3, 11, 10, 0)


class FakeClock:
    """Settable clock; call it to read the current value"""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class ScriptedAuthenticator:
    """Step-up factor that resolves immediately with a fixed outcome"""

    def __init__(self, outcome: AuthOutcome = AuthOutcome.SUCCESS):
        self.outcome = outcome
        self.invocations = 0

    async def invoke(self) -> AuthOutcome:
        self.invocations += 1
        return self.outcome


class GatedAuthenticator:
    """
    Step-up factor that waits until release() is called.

    With ignore_cancel=True it swallows cancellation and still reports its
    outcome, like a sensor callback that fires after the prompt was closed.
    """

    def __init__(self, outcome: AuthOutcome = AuthOutcome.SUCCESS, ignore_cancel: bool = False):
        self.outcome = outcome
        self.ignore_cancel = ignore_cancel
        self.started = asyncio.Event()
        self._released = asyncio.Event()

    def release(self) -> None:
        self._released.set()

    async def invoke(self) -> AuthOutcome:
        self.started.set()
        try:
            await self._released.wait()
        except asyncio.CancelledError:
            if not self.ignore_cancel:
                raise
            await self._released.wait()
        return self.outcome


class RecordingBackend:
    """Transaction recorder that keeps what it was given"""

    def __init__(self):
        self.recorded: List[Transaction] = []

    async def record_transaction(self, transaction: Transaction) -> None:
        self.recorded.append(transaction)


class StubIssuer:
    """Voucher issuer that yields to the loop before answering, so purchases interleave"""

    def __init__(self):
        self.issued = 0

    async def issue(self, voucher: Voucher, now: datetime) -> VoucherPurchase:
        await asyncio.sleep(0)
        self.issued += 1
        return VoucherPurchase(voucher.voucher_id, f"TST-000-{self.issued:03d}", date(2025, 3, 11))


@pytest.fixture
def employer() -> Employer:
    """TechCorp policy: 25% cap, R25 + 1% fee capped at R60"""
    return Employer(
        employer_id="1",
        code="TECH001",
        name="TechCorp SA",
        payroll_day=25,
        advance_cap=0.25,
        fee_structure=FeeStructure(flat_cents=2_500, percentage=0.01, max_cents=6_000),
    )


@pytest.fixture
def user() -> User:
    """R150/h employee without biometric step-up"""
    return User(
        user_id="1",
        name="Thabo Mbeki",
        email="thabo@example.com",
        phone="0821234567",
        employer_id="1",
        hourly_rate_cents=15_000,
        start_date=date(2023, 1, 15),
        is_full_time=True,
        biometric_enabled=False,
        preferred_payment_method=PaymentMethod.INSTANT,
        wellness_score=750,
    )


@pytest.fixture
def biometric_user(user: User) -> User:
    from dataclasses import replace

    return replace(user, biometric_enabled=True)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture
def notifications() -> NotificationQueue:
    return NotificationQueue(ttl_seconds=5.0, clock=FakeClock(1_000.0))


@pytest.fixture
def recorder() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def voucher() -> Voucher:
    return Voucher(
        voucher_id="1",
        category=VoucherCategory.MOBILE,
        provider="Vodacom",
        name="R50 Airtime",
        face_value_cents=5_000,
        price_cents=4_800,
        discount_percent=4,
        stock=1,
    )


@pytest.fixture
def container() -> ServiceContainer:
    """Container over the demo fixtures, pinned to FIXED_NOW"""
    return ServiceContainer(FixtureBackend(), issuer=StubIssuer(), clock=FakeClock(FIXED_NOW))


@pytest.fixture
def client(container: ServiceContainer) -> TestClient:
    """Create FastAPI test client over the fixture backend"""
    app = create_app(container)
    return TestClient(app)


def login(client: TestClient, email: str, password: str = "secret") -> Dict[str, str]:
    """Sign in and return the bearer auth header"""
    response = client.post("/v1/session/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def thabo_headers(client: TestClient) -> Dict[str, str]:
    """Fixture user 1: TechCorp, R150/h, biometric step-up enabled"""
    return login(client, "thabo@example.com")


@pytest.fixture
def sarah_headers(client: TestClient) -> Dict[str, str]:
    """Fixture user 2: RetailHub, R120/h, no biometric step-up"""
    return login(client, "sarah@example.com")


@pytest.fixture
def admin_headers(client: TestClient) -> Dict[str, str]:
    return login(client, "admin@example.com")
