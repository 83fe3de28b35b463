"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Requested amount is zero, negative or not a whole number of cents"""

    pass


class AmountExceedsCeilingError(DomainException):
    """Requested advance is above the advanceable ceiling right now"""

    def __init__(self, amount_cents: int, ceiling_cents: int):
        super().__init__(
            f"Requested amount {amount_cents} exceeds available advance {ceiling_cents}"
        )
        self.amount_cents = amount_cents
        self.ceiling_cents = ceiling_cents


class WorkflowAlreadyActiveError(DomainException):
    """User already has an advance awaiting step-up authentication"""

    pass


class InvalidWorkflowTransitionError(DomainException):
    """Operation is not allowed in the workflow's current state"""

    pass


class OutOfStockError(DomainException):
    """Voucher has no stock left"""

    pass


class VoucherNotFoundError(DomainException):
    """Voucher id is not in the catalog"""

    pass


class AuthCancelledError(DomainException):
    """Step-up authentication was cancelled; the request returns to draft"""

    pass


class AuthFailedError(DomainException):
    """Step-up authentication was rejected"""

    pass


class BackendUnavailableError(DomainException):
    """Backend API returned an error or is unavailable"""

    pass


class InvalidCredentialsError(DomainException):
    """Backend refused the login"""

    pass


class EntityNotFoundError(DomainException):
    """Backend has no record with the requested id"""

    pass
