"""Backend wrapper that falls back to fixtures when the real backend is unreachable"""

import logging
from typing import Any, List, Optional

from ewa_gateway.domain.exceptions import BackendUnavailableError
from ewa_gateway.domain.models import Employer, LoginResult, Transaction, User, Voucher, WellnessScore
from ewa_gateway.infrastructure.clients.backend import Backend
from ewa_gateway.infrastructure.observability.metrics import backend_fallback_counter


class ResilientBackend:
    """
    Primary backend with an explicit fallback.

    Only BackendUnavailableError triggers the fallback; credential and
    not-found errors from the primary are real answers and propagate.
    """

    def __init__(self, primary: Backend, fallback: Backend):
        self.primary = primary
        self.fallback = fallback

    async def login(self, email: str, password: str) -> LoginResult:
        return await self._call("login", email, password)

    async def get_user(self, user_id: str) -> User:
        return await self._call("get_user", user_id)

    async def list_users(self) -> List[User]:
        return await self._call("list_users")

    async def get_employer(self, employer_id: str) -> Employer:
        return await self._call("get_employer", employer_id)

    async def list_employers(self) -> List[Employer]:
        return await self._call("list_employers")

    async def list_transactions(self, user_id: Optional[str] = None) -> List[Transaction]:
        return await self._call("list_transactions", user_id)

    async def list_vouchers(self, category: Optional[str] = None) -> List[Voucher]:
        return await self._call("list_vouchers", category)

    async def record_transaction(self, transaction: Transaction) -> None:
        return await self._call("record_transaction", transaction)

    async def get_wellness_score(self, user_id: str) -> WellnessScore:
        return await self._call("get_wellness_score", user_id)

    async def _call(self, operation: str, *args: Any) -> Any:
        try:
            return await getattr(self.primary, operation)(*args)
        except BackendUnavailableError as e:
            backend_fallback_counter.labels(operation=operation).inc()
            logging.warning(
                f"Backend unavailable, serving {operation} from fixtures: {e}",
                extra={"operation": operation},
            )
            return await getattr(self.fallback, operation)(*args)
