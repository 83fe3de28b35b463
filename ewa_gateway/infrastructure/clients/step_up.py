"""Step-up authentication factors used to gate advance requests"""

import asyncio
from typing import Optional

from ewa_gateway.config import settings
from ewa_gateway.domain.models import AuthOutcome


class SimulatedBiometricAuthenticator:
    """Demo fingerprint scan: waits for the scan duration, then reports the configured outcome"""

    def __init__(self, scan_seconds: float | None = None, outcome: AuthOutcome = AuthOutcome.SUCCESS):
        self.scan_seconds = settings.biometric_scan_seconds if scan_seconds is None else scan_seconds
        self.outcome = outcome

    async def invoke(self) -> AuthOutcome:
        await asyncio.sleep(self.scan_seconds)
        return self.outcome


class PresentedAssertionAuthenticator:
    """
    Outcome reported by the client device along with the request.

    The biometric check runs on the device; a request that needs step-up but
    carries no outcome is treated as rejected.
    """

    def __init__(self, outcome: Optional[AuthOutcome]):
        self.outcome = outcome

    async def invoke(self) -> AuthOutcome:
        if self.outcome is None:
            return AuthOutcome.REJECTED
        return AuthOutcome(self.outcome)
