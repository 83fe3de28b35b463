"""Service wiring: one container per running application"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from ewa_gateway.config import Settings, settings
from ewa_gateway.domain.marketplace import VoucherIssuer, VoucherMarketplace
from ewa_gateway.domain.models import PaymentMethod
from ewa_gateway.domain.period import PayPeriodPolicy
from ewa_gateway.domain.workflow import AdvanceWorkflow, AdvanceWorkflowRegistry, StepUpAuthenticator
from ewa_gateway.infrastructure.clients.backend import Backend, HttpBackendClient
from ewa_gateway.infrastructure.clients.fixtures import FixtureBackend
from ewa_gateway.infrastructure.clients.resilient import ResilientBackend
from ewa_gateway.infrastructure.clients.voucher_issuer import LocalVoucherIssuer
from ewa_gateway.session import SessionContext, open_session


def build_backend(config: Settings = settings) -> Backend:
    """Backend selected by configuration: http, fixture, or http with fixture fallback"""
    if config.backend_mode == "fixture":
        return FixtureBackend()

    http_backend = HttpBackendClient(config.backend_api_base, config.http_timeout_seconds)
    if config.backend_mode == "http":
        return http_backend
    return ResilientBackend(http_backend, FixtureBackend())


class ServiceContainer:
    """Holds the backend, open sessions, the voucher catalog and per-user advance workflows"""

    def __init__(
        self,
        backend: Backend,
        issuer: Optional[VoucherIssuer] = None,
        clock: Callable[[], datetime] = datetime.now,
        policy: Optional[PayPeriodPolicy] = None,
        notification_ttl: float | None = None,
    ):
        self.backend = backend
        self.issuer = issuer or LocalVoucherIssuer()
        self.clock = clock
        self.policy = policy or PayPeriodPolicy(settings.pay_period_policy)
        self.notification_ttl = notification_ttl
        self.workflows = AdvanceWorkflowRegistry()
        self.sessions: Dict[str, SessionContext] = {}
        self._marketplace: Optional[VoucherMarketplace] = None
        self._marketplace_lock = asyncio.Lock()

    async def open_session(self, email: str, password: str) -> SessionContext:
        session = await open_session(self.backend, email, password, notification_ttl=self.notification_ttl)
        self.sessions[session.token] = session
        logging.info("Session opened", extra={"user_id": session.user_id, "is_admin": session.is_admin})
        return session

    def get_session(self, token: str) -> Optional[SessionContext]:
        return self.sessions.get(token)

    def close_session(self, token: str) -> None:
        session = self.sessions.pop(token, None)
        if session is None:
            return
        self.workflows.release(session.user_id)
        session.close()
        logging.info("Session closed", extra={"user_id": session.user_id})

    async def marketplace(self) -> VoucherMarketplace:
        """Voucher catalog, loaded from the backend on first use and shared afterwards"""
        async with self._marketplace_lock:
            if self._marketplace is None:
                vouchers = await self.backend.list_vouchers()
                self._marketplace = VoucherMarketplace(vouchers, self.issuer, self.backend, clock=self.clock)
        return self._marketplace

    def start_advance(
        self,
        session: SessionContext,
        amount_cents: int,
        authenticator: StepUpAuthenticator,
        payment_method: Optional[PaymentMethod] = None,
    ) -> AdvanceWorkflow:
        """
        Open a draft advance for the session's user.

        Raises:
            WorkflowAlreadyActiveError: a previous request is still awaiting step-up
        """
        workflow = self.workflows.start(
            session.user,
            session.employer,
            authenticator,
            self.backend,
            session.notifications,
            clock=self.clock,
            policy=self.policy,
        )
        workflow.set_amount(amount_cents, payment_method)
        return workflow
