import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.exceptions import GymFlowException, RateLimitException
from app.core.logging_config import log_security_event, setup_logging
from app.core.rate_limit import RateLimiter
from app.routes import (
    admin_routes,
    auth_routes,
    dashboard_routes,
    member_routes,
    plan_routes,
    trainer_routes,
)
from app.schemas.common import error_response
from app.store.factory import create_store
from app.store.seed import seed_sample_data

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)

    store = create_store(settings)
    await store.start()
    app.state.store = store
    app.state.rate_limiter = (
        RateLimiter(settings.RATE_LIMIT_WINDOW_SECONDS, settings.RATE_LIMIT_MAX_REQUESTS)
        if settings.RATE_LIMIT_ENABLED
        else None
    )

    if settings.SEED_SAMPLE_DATA:
        await seed_sample_data(store)

    logger.info("GymFlow API started with %s store", store.backend_name)
    try:
        yield
    finally:
        await store.stop()
        logger.info("GymFlow API stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is not None and request.url.path.startswith("/api"):
        client = request.client.host if request.client else "unknown"
        try:
            limiter.check(client)
        except RateLimitException as exc:
            log_security_event("rate_limited", request)
            return JSONResponse(
                status_code=exc.status_code,
                content=error_response(exc.message, exc.code, **exc.extra),
                headers={"Retry-After": str(exc.extra["retryAfter"])},
            )
    return await call_next(request)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Tenant-ID"],
    )


# Exception handlers
@app.exception_handler(GymFlowException)
async def gymflow_exception_handler(request: Request, exc: GymFlowException):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, exc.code, **exc.extra),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in error["loc"] if part != "body"), "message": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response("Validation failed", "VALIDATION_ERROR", details=details),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response("Internal server error", "SERVER_ERROR"),
        headers=SECURITY_HEADERS,
    )


# Health check endpoint
@app.get("/api/health")
async def health_check(request: Request):
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "database": await request.app.state.store.health_check(),
    }


# Include routers
app.include_router(auth_routes.router, prefix="/api/auth", tags=["Auth"])
app.include_router(member_routes.router, prefix="/api/members", tags=["Members"])
app.include_router(plan_routes.router, prefix="/api/plans", tags=["Plans"])
app.include_router(trainer_routes.router, prefix="/api/trainers", tags=["Trainers"])
app.include_router(dashboard_routes.router, prefix="/api", tags=["Dashboard"])
app.include_router(admin_routes.router, prefix="/api/admin", tags=["Admin"])
