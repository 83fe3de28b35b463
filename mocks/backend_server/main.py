from fastapi import FastAPI, HTTPException
from typing import Optional

from ewa_gateway.domain.exceptions import EntityNotFoundError, InvalidCredentialsError
from ewa_gateway.infrastructure.clients.fixtures import FixtureBackend
from ewa_gateway.infrastructure.clients.payloads import (
    EmployerPayload,
    LoginRequestPayload,
    LoginResponsePayload,
    TransactionPayload,
    UserPayload,
    VoucherPayload,
)


def create_mock_backend(backend: Optional[FixtureBackend] = None) -> FastAPI:
    """Mock backend speaking the gateway's backend wire contract over fixture data"""
    store = backend or FixtureBackend()
    app = FastAPI(title="Mock EWA Backend", version="1.0.0")

    @app.get("/health")
    def health(): return {"status": "ok"}

    @app.post("/auth/login")
    async def login(body: LoginRequestPayload):
        try:
            result = await store.login(body.email, body.password)
        except InvalidCredentialsError:
            raise HTTPException(status_code=401, detail="invalid credentials")
        return LoginResponsePayload(
            token=result.token,
            user=UserPayload.from_domain(result.user),
            is_admin=result.is_admin,
        )

    @app.get("/users")
    async def list_users():
        return [UserPayload.from_domain(u) for u in await store.list_users()]

    @app.get("/users/{user_id}")
    async def get_user(user_id: str):
        try:
            return UserPayload.from_domain(await store.get_user(user_id))
        except EntityNotFoundError:
            raise HTTPException(status_code=404, detail="user not found")

    @app.get("/employers")
    async def list_employers():
        return [EmployerPayload.from_domain(e) for e in await store.list_employers()]

    @app.get("/employers/{employer_id}")
    async def get_employer(employer_id: str):
        try:
            return EmployerPayload.from_domain(await store.get_employer(employer_id))
        except EntityNotFoundError:
            raise HTTPException(status_code=404, detail="employer not found")

    @app.get("/transactions")
    async def list_all_transactions():
        return [TransactionPayload.from_domain(t) for t in await store.list_transactions()]

    @app.get("/transactions/{user_id}")
    async def list_transactions(user_id: str):
        return [TransactionPayload.from_domain(t) for t in await store.list_transactions(user_id)]

    @app.post("/transactions", status_code=201)
    async def record_transaction(body: TransactionPayload):
        await store.record_transaction(body.to_domain())
        return {"success": True}

    @app.get("/vouchers")
    async def list_vouchers(category: Optional[str] = None):
        return [VoucherPayload.from_domain(v) for v in await store.list_vouchers(category)]

    @app.get("/wellness/{user_id}")
    async def get_wellness(user_id: str):
        try:
            wellness = await store.get_wellness_score(user_id)
        except EntityNotFoundError:
            raise HTTPException(status_code=404, detail="user not found")
        return {"score": wellness.score, "max_score": wellness.max_score}

    return app


app = create_mock_backend()
