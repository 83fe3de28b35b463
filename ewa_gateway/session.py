"""Per-login application context: who is signed in and what they see"""

import time
from dataclasses import replace
from typing import Callable, List, Optional

from ewa_gateway.config import settings
from ewa_gateway.domain.models import Employer, NotificationType, PaymentMethod, Transaction, User
from ewa_gateway.domain.notifications import NotificationQueue
from ewa_gateway.infrastructure.clients.backend import Backend


class SessionContext:
    """
    State for one signed-in user, passed explicitly to whatever needs it.

    Built by open_session() at login and torn down with close() at logout.
    """

    def __init__(
        self,
        token: str,
        user: User,
        employer: Employer,
        backend: Backend,
        notifications: NotificationQueue,
        is_admin: bool = False,
    ):
        self.token = token
        self.user = user
        self.employer = employer
        self.backend = backend
        self.notifications = notifications
        self.is_admin = is_admin
        self.transactions: List[Transaction] = []

    @property
    def user_id(self) -> str:
        return self.user.user_id

    async def refresh_transactions(self) -> List[Transaction]:
        self.transactions = await self.backend.list_transactions(self.user_id)
        return self.transactions

    def add_transaction(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)

    def update_settings(
        self,
        biometric_enabled: Optional[bool] = None,
        preferred_payment_method: Optional[PaymentMethod] = None,
    ) -> User:
        """Apply security and payment preferences to this session's user"""
        changes = {}
        if biometric_enabled is not None:
            changes["biometric_enabled"] = biometric_enabled
        if preferred_payment_method is not None:
            changes["preferred_payment_method"] = PaymentMethod(preferred_payment_method)

        if changes:
            self.user = replace(self.user, **changes)
            self.notifications.push(NotificationType.INFO, "Settings updated")
        return self.user

    def close(self) -> None:
        self.notifications.clear()


async def open_session(
    backend: Backend,
    email: str,
    password: str,
    notification_ttl: float | None = None,
    clock: Callable[[], float] = time.time,
) -> SessionContext:
    """
    Log in and build the session context.

    The admin role is whatever the backend granted at login.

    Raises:
        InvalidCredentialsError: backend refused the login
        EntityNotFoundError: the user's employer does not exist
    """
    result = await backend.login(email, password)
    employer = await backend.get_employer(result.user.employer_id)

    ttl = settings.notification_ttl_seconds if notification_ttl is None else notification_ttl
    session = SessionContext(
        token=result.token,
        user=result.user,
        employer=employer,
        backend=backend,
        notifications=NotificationQueue(ttl_seconds=ttl, clock=clock),
        is_admin=result.is_admin,
    )
    await session.refresh_transactions()
    session.notifications.push(NotificationType.SUCCESS, "Login successful!")
    return session
