"""FastAPI application factory"""

from typing import Optional

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ewa_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ewa_gateway.api.v1 import admin, advances, history, session, vouchers
from ewa_gateway.container import ServiceContainer, build_backend
from ewa_gateway.infrastructure.observability.logging import setup_logging
from ewa_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Earned Wage Access Gateway",
        description="Earned-wage advances, voucher marketplace and wellness score service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = container or ServiceContainer(build_backend(settings))

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(session.router, prefix="/v1", tags=["session"])
    app.include_router(advances.router, prefix="/v1", tags=["advances"])
    app.include_router(vouchers.router, prefix="/v1", tags=["vouchers"])
    app.include_router(history.router, prefix="/v1", tags=["history"])
    app.include_router(admin.router, prefix="/v1", tags=["admin"])

    return app


app = create_app()
