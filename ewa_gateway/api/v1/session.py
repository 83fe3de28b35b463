"""Session endpoints - login, logout and user settings"""

from fastapi import APIRouter, Depends, HTTPException

from ewa_gateway.api.dependencies import get_container, get_session
from ewa_gateway.api.v1.schemas import LoginRequest, SessionResponse, SettingsUpdateRequest
from ewa_gateway.container import ServiceContainer
from ewa_gateway.domain.exceptions import EntityNotFoundError, InvalidCredentialsError
from ewa_gateway.infrastructure.clients.payloads import EmployerPayload, UserPayload
from ewa_gateway.session import SessionContext

router = APIRouter()


@router.post("/session/login", response_model=SessionResponse)
async def login(
    request_body: LoginRequest,
    container: ServiceContainer = Depends(get_container),
):
    """
    Sign in and open a session.

    Returns:
        Bearer token plus the user's profile and employer policy
    """
    try:
        session = await container.open_session(request_body.email, request_body.password)
    except InvalidCredentialsError:
        raise HTTPException(status_code=401, detail="Login failed. Please try again.")
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return SessionResponse(
        token=session.token,
        is_admin=session.is_admin,
        user=UserPayload.from_domain(session.user),
        employer=EmployerPayload.from_domain(session.employer),
    )


@router.post("/session/logout", status_code=204)
def logout(
    session: SessionContext = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
):
    container.close_session(session.token)


@router.patch("/me/settings", response_model=UserPayload)
def update_settings(
    request_body: SettingsUpdateRequest,
    session: SessionContext = Depends(get_session),
):
    """Toggle biometric step-up and change the default payment method"""
    user = session.update_settings(
        biometric_enabled=request_body.biometric_enabled,
        preferred_payment_method=request_body.preferred_payment_method,
    )
    return UserPayload.from_domain(user)
