"""RuleBridge — rule-based model validation for FastAPI.

Application factory with structured logging, the validation pipeline and global error handling.
"""

import logging
from typing import Iterable, Optional

import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from rulebridge.config import Settings, get_settings
from rulebridge.integration.routing import install
from rulebridge.rules.factory import ValidatorFactory

logger = structlog.get_logger()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog: console output in debug mode, JSON otherwise."""
    settings = settings or get_settings()
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def create_app(
    validator_factory: Optional[ValidatorFactory] = None,
    routers: Iterable[APIRouter] = (),
    settings: Optional[Settings] = None,
    **fastapi_kwargs,
) -> FastAPI:
    """Create a FastAPI application with rule-based model validation installed.

    Args:
        validator_factory: Validators for bound models. An empty factory is used if omitted.
        routers: Routers to include; use APIRouter(route_class=ModelValidationRoute) for validated routes
        settings: Overrides the environment-derived settings
        **fastapi_kwargs: Passed through to FastAPI()
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(debug=settings.DEBUG, **fastapi_kwargs)

    # ── Validation Pipeline ──

    install(app, validator_factory if validator_factory is not None else ValidatorFactory(), settings=settings)

    # ── Global Exception Handlers ──

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all error handler for unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again.",
            },
        )

    # ── Routes ──

    for router in routers:
        app.include_router(router)

    logger.info("app_created", routers=len(app.routes), debug=settings.DEBUG)
    return app
