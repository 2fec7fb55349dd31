"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from mca_scorecard.api.middleware import RequestIDMiddleware, MetricsMiddleware
from mca_scorecard.api.v1 import analysis
from mca_scorecard.infrastructure.observability.logging import setup_logging
from mca_scorecard.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="MCA Scorecard",
        description="Financial analytics and underwriting scorecard for merchant cash advance deals",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(analysis.router, prefix="/v1", tags=["analysis"])

    return app


app = create_app()
