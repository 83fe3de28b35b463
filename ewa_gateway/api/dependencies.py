"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, HTTPException, Request

from ewa_gateway.container import ServiceContainer
from ewa_gateway.session import SessionContext


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_container(request: Request) -> ServiceContainer:
    """Provide the application's service container"""
    return request.app.state.container


def get_session(
    authorization: str | None = Header(None),
    container: ServiceContainer = Depends(get_container),
) -> SessionContext:
    """Resolve the bearer token to an open session"""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")

    session = container.get_session(authorization[7:].strip())
    if session is None:
        raise HTTPException(status_code=401, detail="Session expired or unknown")
    return session


def require_admin(session: SessionContext = Depends(get_session)) -> SessionContext:
    if not session.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return session
