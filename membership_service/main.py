"""ASGI application: routers, error mapping and the service container lifecycle."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from membership_service.config import Config, get_config
from membership_service.errors import InvalidArgumentError, MembershipError
from membership_service.logging_config import configure_logging_from_env, get_logger
from membership_service.middleware import ContextMiddleware, RequestLoggingMiddleware
from membership_service.services.container import ServiceContainer, build_container

logger = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(config: Optional[Config] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the membership API.

    Args:
        config: Loaded configuration (the global configuration if omitted)
        container: Pre-built services (built from configuration at start-up if omitted)
    """
    configure_logging_from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = container.settings if container else (config or get_config()).settings
        logger.info("service_starting", service=settings.service.name, version=settings.service.version)

        app.state.container = container or build_container(settings)
        if app.state.container.dispatcher.is_enabled():
            logger.info("analytics_publishing", topic=settings.pubsub.topic)
        else:
            logger.info("analytics_local_only")

        logger.info("service_started", status="ready")
        try:
            yield
        finally:
            logger.info("service_shutting_down")
            app.state.container.shutdown()
            logger.info("service_stopped")

    app = FastAPI(
        title="Membership Service",
        description="Subscription lifecycle, plans, notifications and admin oversight",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    include_request_details = os.getenv("LOG_REQUEST_DETAILS", "true").lower() == "true"
    app.add_middleware(RequestLoggingMiddleware, include_request_details=include_request_details)
    app.add_middleware(ContextMiddleware)

    from membership_service.api.admin import router as admin_router
    from membership_service.api.subscriptions import router as subscriptions_router

    app.include_router(subscriptions_router)
    app.include_router(admin_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Service identity."""
        settings = app.state.container.settings
        return {
            "service": settings.service.name,
            "status": "running",
            "version": settings.service.version,
        }

    @app.get("/health")
    def health() -> dict[str, str]:
        """Backends in use and the size of the plan catalog."""
        container = app.state.container
        plans = container.catalog.list_all()
        return {
            "status": "healthy",
            "storage": container.settings.storage.backend,
            "email": "smtp" if container.settings.email.is_configured else "disabled",
            "pubsub": "connected" if container.dispatcher.is_enabled() else "disabled",
            "plans": f"loaded ({len(plans)} total plans)",
        }

    @app.exception_handler(MembershipError)
    async def membership_error_handler(request: Request, exc: MembershipError) -> JSONResponse:
        """Render rejected operations as {"error": kind, "message": ...}."""
        logger.warning(
            "operation_rejected",
            error=exc.kind,
            message=exc.message,
            path=request.url.path,
            **exc.context,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _validation_message(exc)
        logger.warning("request_validation_failed", path=request.url.path, message=message)
        return JSONResponse(
            status_code=InvalidArgumentError.status_code,
            content={"error": InvalidArgumentError.kind, "message": message},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
            },
        )

    logger.info("app_created", endpoints=len(app.routes))
    return app


app = create_app()
