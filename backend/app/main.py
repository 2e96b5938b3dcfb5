"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import Settings, settings
from app.dependencies import build_context
from app.errors import UnhandledErrorMiddleware, register_exception_handlers
from app.routes import profile, simplifier, use_case
from app.services.profile_generator import format_fhir_instant

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the API application for the given settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build outbound clients at startup, close them on shutdown."""
        app.state.context = build_context(app_settings)
        try:
            yield
        finally:
            await app.state.context.close()

    app = FastAPI(
        title="FHIRSquire",
        description="FHIR profile recommendation, generation and publishing assistant",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Innermost first: errors are converted before CORS headers are added
    app.add_middleware(UnhandledErrorMiddleware, debug=app_settings.debug)
    app.add_middleware(SecurityHeadersMiddleware)

    # Credentials cannot be combined with a wildcard origin
    origins = app_settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app, debug=app_settings.debug)

    app.include_router(use_case.router, prefix=API_PREFIX)
    app.include_router(profile.router, prefix=API_PREFIX)
    app.include_router(simplifier.router, prefix=API_PREFIX)

    @app.get("/health")
    @app.get(f"{API_PREFIX}/health")
    async def health_check() -> dict:
        """Liveness probe."""
        return {"status": "ok", "timestamp": format_fhir_instant(datetime.now(timezone.utc))}

    @app.get("/")
    async def root() -> dict:
        """Root endpoint with API info."""
        return {
            "name": "FHIRSquire API",
            "version": app.version,
            "docs": "/docs",
        }

    return app


app = create_app()
