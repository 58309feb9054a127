"""
FastAPI application factory and main app configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.errors import APIError, domain_error_status
from .api.routers import composition, drawings, health, patients, payments, prescriptions, templates
from .api.schemas.common import ErrorResponse
from .core.config import get_settings
from .core.structured_logger import configure_logging
from .domain.errors import DomainError
from .middleware.auth_middleware import AuthenticationMiddleware
from .middleware.performance_middleware import PerformanceMiddleware
from .middleware.request_id_middleware import RequestIDMiddleware

logger = logging.getLogger("clinicrx")


async def init_database(settings) -> None:
    """Connect Motor and register the Beanie document models."""
    import certifi
    from beanie import init_beanie
    from motor.motor_asyncio import AsyncIOMotorClient

    from .adapters.db.mongo.models import DOCUMENT_MODELS

    mongo_uri = settings.database.uri
    # Enable TLS only for Atlas SRV URIs
    if mongo_uri.startswith("mongodb+srv://"):
        client = AsyncIOMotorClient(
            mongo_uri,
            serverSelectionTimeoutMS=15000,
            tls=True,
            tlsCAFile=certifi.where(),
            tlsAllowInvalidCertificates=False,
        )
    else:
        client = AsyncIOMotorClient(mongo_uri, serverSelectionTimeoutMS=15000)
    await init_beanie(database=client[settings.database.db_name], document_models=DOCUMENT_MODELS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.app_env})")

    if settings.database.uri:
        try:
            await init_database(settings)
            logger.info("Database connection established")
        except Exception as e:
            logger.error(f"Database connection failed: {type(e).__name__}: {e}", exc_info=True)
            raise
    else:
        logger.warning("MONGO_URI is not set; patient and prescription endpoints will fail")

    yield

    logger.info(f"Shutting down {settings.app_name}")


def _error_body(request: Request, error: str, message: str, details: dict = None) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return ErrorResponse(error=error, message=message, request_id=req_id or "", details=details or {}).model_dump()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Prescription drawing, composition and patient records for small clinics",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    allow_headers = settings.cors.allowed_headers or ["*"]
    if allow_headers != ["*"]:
        for header in ("content-type", "authorization", "x-api-key"):
            if header not in {h.lower() for h in allow_headers}:
                allow_headers.append(header)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=False,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=allow_headers,
        max_age=600,
        expose_headers=[
            "Content-Disposition",
            "X-Composition-Generation",
            "X-Composition-Current",
            "X-Page-Count",
            "X-Request-ID",
        ],
    )
    app.add_middleware(AuthenticationMiddleware)
    app.add_middleware(PerformanceMiddleware)
    # Outermost, so every other middleware sees the request id
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router)
    app.include_router(patients.router)
    app.include_router(prescriptions.router)
    app.include_router(composition.router)
    app.include_router(payments.router)
    app.include_router(templates.router)
    app.include_router(drawings.router)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = domain_error_status(exc)
        if status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.message} | details={exc.details}")
        else:
            logger.warning(f"{exc.error_code}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=_error_body(request, exc.error_code or "DOMAIN_ERROR", exc.message, exc.details),
        )

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.warning(f"APIError: {exc.code} ({exc.http_status}) {exc.message}")
        return JSONResponse(
            status_code=exc.http_status,
            content=_error_body(request, exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "loc": [str(part) for part in error.get("loc", [])],
                "msg": error.get("msg", "Validation error"),
                "type": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        logger.warning(f"Validation error on {request.method} {request.url.path}: {errors}")
        messages = "; ".join(f"{' -> '.join(e['loc'])}: {e['msg']}" for e in errors)
        return JSONResponse(
            status_code=422,
            content=_error_body(
                request,
                "INVALID_INPUT",
                f"Input validation failed: {messages}",
                {"errors": errors, "path": request.url.path},
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "INTERNAL_ERROR", "An unexpected error occurred"),
        )

    @app.get("/", include_in_schema=False)
    async def root():
        return {"service": settings.app_name, "version": settings.app_version, "status": "running"}

    return app


app = create_app()
