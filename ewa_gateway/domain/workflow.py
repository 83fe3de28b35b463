"""
Advance request workflow - state machine from draft to completed transaction.

    DRAFT --submit--> PENDING_AUTH --authorize--> AUTHORIZING --success--> APPROVED --> COMPLETED
      |                                               |   |
      +--(no step-up required)--> APPROVED            |   +--rejected--> FAILED
                                                      +--cancelled / cancel()--> DRAFT (amount kept)

The workflow suspends on the step-up factor and on the backend write. While it
sits in PENDING_AUTH, AUTHORIZING or APPROVED no other mutation is accepted for
it, and the registry refuses a second workflow for the same user.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

from ewa_gateway.domain.earnings import advanceable_ceiling
from ewa_gateway.domain.exceptions import (
    AmountExceedsCeilingError,
    AuthCancelledError,
    AuthFailedError,
    DomainException,
    InvalidAmountError,
    InvalidWorkflowTransitionError,
    WorkflowAlreadyActiveError,
)
from ewa_gateway.domain.fees import compute_fee, validate_amount
from ewa_gateway.domain.models import (
    AuthOutcome,
    Employer,
    NotificationType,
    PaymentMethod,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)
from ewa_gateway.domain.notifications import NotificationQueue
from ewa_gateway.domain.period import PayPeriodPolicy
from ewa_gateway.infrastructure.observability.logging import log_advance_outcome
from ewa_gateway.infrastructure.observability.metrics import record_advance
from ewa_gateway.utils.money import format_rands


class WorkflowState(str, Enum):
    DRAFT = "draft"
    PENDING_AUTH = "pending_auth"
    AUTHORIZING = "authorizing"
    APPROVED = "approved"
    COMPLETED = "completed"
    FAILED = "failed"


# APPROVED covers the backend write, which may suspend while retrying
ACTIVE_STATES = (WorkflowState.PENDING_AUTH, WorkflowState.AUTHORIZING, WorkflowState.APPROVED)


class StepUpAuthenticator(Protocol):
    """Step-up factor (biometric prompt). Suspends until the user resolves it."""

    async def invoke(self) -> AuthOutcome: ...


class TransactionRecorder(Protocol):
    async def record_transaction(self, transaction: Transaction) -> None: ...


class AdvanceWorkflow:
    """One advance request for one user"""

    def __init__(
        self,
        user: User,
        employer: Employer,
        authenticator: StepUpAuthenticator,
        recorder: TransactionRecorder,
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = datetime.now,
        policy: PayPeriodPolicy = PayPeriodPolicy.CALENDAR_MONTH,
    ):
        self.user = user
        self.employer = employer
        self.state = WorkflowState.DRAFT
        self.amount_cents: Optional[int] = None
        self.payment_method = user.preferred_payment_method
        self.transaction: Optional[Transaction] = None
        self._authenticator = authenticator
        self._recorder = recorder
        self._notifications = notifications
        self._clock = clock
        self._policy = policy
        self._attempt = 0
        self._auth_task: Optional[asyncio.Future] = None

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_STATES

    def set_amount(self, amount_cents: int, payment_method: Optional[PaymentMethod] = None) -> None:
        self._require(WorkflowState.DRAFT, "change the amount")
        self.amount_cents = amount_cents
        if payment_method is not None:
            self.payment_method = PaymentMethod(payment_method)

    async def submit(self) -> Optional[Transaction]:
        """
        Validate the draft and move it forward.

        Returns the completed Transaction when no step-up is required, or None
        when the workflow is now waiting in PENDING_AUTH for authorize().

        Raises:
            InvalidAmountError, AmountExceedsCeilingError: workflow stays in DRAFT
        """
        self._require(WorkflowState.DRAFT, "submit")
        self._check_amount()

        if self.user.biometric_enabled:
            self.state = WorkflowState.PENDING_AUTH
            return None

        self.state = WorkflowState.APPROVED
        return await self._complete()

    async def authorize(self) -> Transaction:
        """
        Invoke the step-up factor and wait for it.

        Raises:
            AuthCancelledError: factor cancelled or cancel() called; back to DRAFT
            AuthFailedError: factor rejected the user; workflow FAILED
            AmountExceedsCeilingError: ceiling dropped while waiting; back to DRAFT
        """
        self._require(WorkflowState.PENDING_AUTH, "authorize")
        self.state = WorkflowState.AUTHORIZING
        self._attempt += 1
        attempt = self._attempt
        self._auth_task = asyncio.ensure_future(self._authenticator.invoke())

        try:
            outcome = await self._auth_task
        except asyncio.CancelledError:
            if attempt == self._attempt:
                # Caller itself was cancelled, not the prompt
                self.state = WorkflowState.DRAFT
                raise
            outcome = AuthOutcome.CANCELLED
        except Exception as e:
            if attempt == self._attempt:
                self._fail("auth_failed", "Authentication failed. Please try again.")
                raise AuthFailedError(str(e)) from e
            outcome = AuthOutcome.REJECTED
        finally:
            if attempt == self._attempt:
                self._auth_task = None

        if attempt != self._attempt:
            # Result arrived after the user cancelled; it must not approve anything
            logging.info(
                "Discarding step-up result after cancellation",
                extra={"user_id": self.user.user_id, "auth_outcome": AuthOutcome(outcome).value},
            )
            raise AuthCancelledError("Advance request cancelled")

        if outcome == AuthOutcome.CANCELLED:
            self.state = WorkflowState.DRAFT
            self._report("cancelled", "Authentication cancelled. Your advance was not requested.")
            raise AuthCancelledError("Advance request cancelled")

        if outcome != AuthOutcome.SUCCESS:
            self._fail("auth_failed", "Authentication failed. Please try again.")
            raise AuthFailedError("Step-up authentication rejected")

        self._check_amount()
        self.state = WorkflowState.APPROVED
        return await self._complete()

    def cancel(self) -> None:
        """
        User cancelled the step-up prompt.

        Takes effect immediately: the workflow is back in DRAFT with the amount
        kept, and any factor result that arrives later is discarded.
        """
        self._require(WorkflowState.AUTHORIZING, "cancel")
        self._attempt += 1
        self.state = WorkflowState.DRAFT
        task, self._auth_task = self._auth_task, None
        if task is not None and not task.done():
            task.cancel()
        self._report("cancelled", "Authentication cancelled. Your advance was not requested.")

    async def _complete(self) -> Transaction:
        fee = compute_fee(self.amount_cents, self.employer.fee_structure)
        transaction = Transaction(
            transaction_id=str(uuid.uuid4()),
            user_id=self.user.user_id,
            amount_cents=self.amount_cents,
            fee_cents=fee,
            type=TransactionType.ADVANCE,
            status=TransactionStatus.COMPLETED,
            created_at=self._clock(),
            payment_method=self.payment_method,
        )

        try:
            await self._recorder.record_transaction(transaction)
        except DomainException:
            # Nothing was recorded; the draft can be retried as is
            self.state = WorkflowState.DRAFT
            self._report("failed", "Advance could not be processed. Please try again.")
            raise

        self.transaction = transaction
        self.state = WorkflowState.COMPLETED
        self._notifications.push(
            NotificationType.SUCCESS,
            f"Advance of {format_rands(self.amount_cents)} approved! Fee: {format_rands(fee)}",
        )
        record_advance("completed", self.amount_cents)
        log_advance_outcome(self.user.user_id, "completed", self.amount_cents, fee, transaction.transaction_id)
        return transaction

    def _check_amount(self) -> None:
        """Amount must be positive and within the ceiling at this moment"""
        try:
            validate_amount(self.amount_cents)
        except InvalidAmountError:
            self.state = WorkflowState.DRAFT
            self._report("invalid_amount", "Please enter a valid amount.")
            raise

        ceiling = advanceable_ceiling(self.user, self.employer, self._clock(), self._policy)
        if self.amount_cents > ceiling:
            self.state = WorkflowState.DRAFT
            self._report(
                "exceeds_ceiling",
                f"Requested amount exceeds your available advance of {format_rands(ceiling)}.",
            )
            raise AmountExceedsCeilingError(self.amount_cents, ceiling)

    def _fail(self, outcome: str, message: str) -> None:
        self.state = WorkflowState.FAILED
        self._report(outcome, message)

    def _report(self, outcome: str, message: str) -> None:
        self._notifications.push(NotificationType.ERROR, message)
        record_advance(outcome)
        log_advance_outcome(self.user.user_id, outcome, self.amount_cents)

    def _require(self, state: WorkflowState, action: str) -> None:
        if self.state is not state:
            raise InvalidWorkflowTransitionError(f"Cannot {action} while workflow is {self.state.value}")


class AdvanceWorkflowRegistry:
    """Tracks the current advance workflow per user; at most one may be active"""

    def __init__(self) -> None:
        self._workflows: Dict[str, AdvanceWorkflow] = {}

    def start(
        self,
        user: User,
        employer: Employer,
        authenticator: StepUpAuthenticator,
        recorder: TransactionRecorder,
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = datetime.now,
        policy: PayPeriodPolicy = PayPeriodPolicy.CALENDAR_MONTH,
    ) -> AdvanceWorkflow:
        """
        Open a new draft for the user.

        Raises:
            WorkflowAlreadyActiveError: the user's previous request is still
                waiting on step-up authentication or being recorded
        """
        current = self._workflows.get(user.user_id)
        if current is not None and current.is_active:
            notifications.push(NotificationType.ERROR, "You already have an advance request in progress.")
            record_advance("already_active")
            raise WorkflowAlreadyActiveError(f"User {user.user_id} already has an active advance request")

        workflow = AdvanceWorkflow(
            user,
            employer,
            authenticator,
            recorder,
            notifications,
            clock=clock,
            policy=policy,
        )
        self._workflows[user.user_id] = workflow
        return workflow

    def get(self, user_id: str) -> Optional[AdvanceWorkflow]:
        return self._workflows.get(user_id)

    def release(self, user_id: str) -> None:
        """Forget the user's workflow (logout). An in-flight factor is cancelled."""
        workflow = self._workflows.pop(user_id, None)
        if workflow is not None and workflow.state is WorkflowState.AUTHORIZING:
            workflow.cancel()
