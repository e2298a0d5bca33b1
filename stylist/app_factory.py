# stylist/app_factory.py
# Builds the FastAPI application around an explicitly owned database handle

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stylist.api.routes import health_router, router
from stylist.exceptions import ValidationError
from stylist.services.email_service import EmailService
from stylist.utils.auth import TokenService, configure_password_hashing
from stylist.utils.clock import Clock, utcnow
from stylist.utils.config import Settings
from stylist.utils.db_setup import Database

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    database: Optional[Database] = None,
    email_service: Optional[EmailService] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    configure_password_hashing(settings.bcrypt_rounds)
    database = database or Database(settings.mongo_uri, settings.database_name)
    email_service = email_service or EmailService.from_settings(settings)
    token_service = TokenService(
        settings.jwt_secret, expire_days=settings.jwt_expire_days, clock=clock
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.connect()
        try:
            yield
        finally:
            database.close()

    app = FastAPI(
        title="Stylist API",
        description="Account and session API for the Stylist fashion app",
        version="1.0.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.email_service = email_service
    app.state.token_service = token_service
    app.state.clock = clock

    if settings.is_production:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    @app.middleware("http")
    async def add_security_headers(request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    origins = ["*"] if settings.is_development else settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )
    logger.info(f"CORS middleware configured with origins: {origins}")

    register_exception_handlers(app, settings)

    app.include_router(router, prefix="/api")
    app.include_router(health_router)
    logger.info("API routes included")
    return app


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Render every failure as ``{"success": false, ...}``."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "errors": exc.errors},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"] if part != "body")
            errors.append(f"{field}: {error['msg']}" if field else error["msg"])
        return JSONResponse(status_code=400, content={"success": False, "errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        content = {"success": False, "message": "Server error"}
        if settings.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)
