"""Backend API HTTP client for users, employers, transactions, vouchers and wellness scores"""

import asyncio
from typing import Any, List, Optional, Protocol

import httpx
from pydantic import ValidationError

from ewa_gateway.config import settings
from ewa_gateway.domain.exceptions import (
    BackendUnavailableError,
    EntityNotFoundError,
    InvalidCredentialsError,
)
from ewa_gateway.domain.models import Employer, LoginResult, Transaction, User, Voucher, WellnessScore
from ewa_gateway.infrastructure.clients.payloads import (
    EmployerPayload,
    LoginResponsePayload,
    TransactionPayload,
    UserPayload,
    VoucherPayload,
    WellnessScorePayload,
)
from ewa_gateway.infrastructure.observability.metrics import (
    backend_latency_histogram,
    backend_record_failures_counter,
)


class Backend(Protocol):
    """Record store the gateway reads from and writes transactions back to"""

    async def login(self, email: str, password: str) -> LoginResult: ...

    async def get_user(self, user_id: str) -> User: ...

    async def list_users(self) -> List[User]: ...

    async def get_employer(self, employer_id: str) -> Employer: ...

    async def list_employers(self) -> List[Employer]: ...

    async def list_transactions(self, user_id: Optional[str] = None) -> List[Transaction]: ...

    async def list_vouchers(self, category: Optional[str] = None) -> List[Voucher]: ...

    async def record_transaction(self, transaction: Transaction) -> None:
        """Append once; writing an already recorded transaction_id again is a no-op"""

    async def get_wellness_score(self, user_id: str) -> WellnessScore: ...


class HttpBackendClient:
    """Client for the external backend API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.backend_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self.max_retries = settings.record_max_retries
        self.backoff_base = settings.record_backoff_base

    async def login(self, email: str, password: str) -> LoginResult:
        data = await self._request("login", "POST", "/auth/login", json={"email": email, "password": password})
        payload = self._parse(LoginResponsePayload, data)
        return LoginResult(token=payload.token, user=payload.user.to_domain(), is_admin=payload.is_admin)

    async def get_user(self, user_id: str) -> User:
        data = await self._request("get_user", "GET", f"/users/{user_id}")
        return self._parse(UserPayload, data).to_domain()

    async def list_users(self) -> List[User]:
        data = await self._request("list_users", "GET", "/users")
        return [self._parse(UserPayload, item).to_domain() for item in data]

    async def get_employer(self, employer_id: str) -> Employer:
        data = await self._request("get_employer", "GET", f"/employers/{employer_id}")
        return self._parse(EmployerPayload, data).to_domain()

    async def list_employers(self) -> List[Employer]:
        data = await self._request("list_employers", "GET", "/employers")
        return [self._parse(EmployerPayload, item).to_domain() for item in data]

    async def list_transactions(self, user_id: Optional[str] = None) -> List[Transaction]:
        path = f"/transactions/{user_id}" if user_id else "/transactions"
        data = await self._request("list_transactions", "GET", path)
        return [self._parse(TransactionPayload, item).to_domain() for item in data]

    async def list_vouchers(self, category: Optional[str] = None) -> List[Voucher]:
        params = {"category": category} if category else None
        data = await self._request("list_vouchers", "GET", "/vouchers", params=params)
        return [self._parse(VoucherPayload, item).to_domain() for item in data]

    async def get_wellness_score(self, user_id: str) -> WellnessScore:
        data = await self._request("get_wellness_score", "GET", f"/wellness/{user_id}")
        return self._parse(WellnessScorePayload, data).to_domain()

    async def record_transaction(self, transaction: Transaction) -> None:
        """
        Write a transaction back to the backend with retry logic.

        Retry strategy:
        - Exponential backoff: base, 2x base, 4x base ... (base^attempt)
        - Retries on 5xx errors and network failures
        - Tracks failure counter; raises after the last attempt
        - Every attempt carries the transaction_id as Idempotency-Key, so a
          write that landed but timed out is not recorded twice

        Raises:
            BackendUnavailableError: every attempt failed
        """
        payload = TransactionPayload.from_domain(transaction).model_dump(mode="json")
        attempt = 0
        while attempt < self.max_retries:
            try:
                await self._request(
                    "record_transaction",
                    "POST",
                    "/transactions",
                    json=payload,
                    headers={"Idempotency-Key": transaction.transaction_id},
                )
                return  # Success

            except BackendUnavailableError:
                attempt += 1
                backend_record_failures_counter.inc()

                if attempt >= self.max_retries:
                    # Final failure after all retries
                    raise

                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> Any:
        """
        Send one request and decode the JSON body.

        Raises:
            InvalidCredentialsError: 401
            EntityNotFoundError: 404
            BackendUnavailableError: On timeout, network errors, other HTTP errors, or a non-JSON body
        """
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
            try:
                with backend_latency_histogram.labels(operation=operation).time():
                    response = await client.request(method, path, **kwargs)

                if response.status_code == 401:
                    raise InvalidCredentialsError("Backend rejected the credentials")
                if response.status_code == 404:
                    raise EntityNotFoundError(f"Backend has no record at {path}")
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise BackendUnavailableError(f"Backend API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise BackendUnavailableError(f"Backend API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise BackendUnavailableError(f"Backend API unreachable: {e}") from e
            except ValueError as e:
                raise BackendUnavailableError(f"Invalid JSON from backend: {e}") from e

    @staticmethod
    def _parse(model: Any, data: Any) -> Any:
        try:
            return model.model_validate(data)
        except (ValidationError, TypeError) as e:
            raise BackendUnavailableError(f"Invalid {model.__name__} data from backend: {e}") from e
