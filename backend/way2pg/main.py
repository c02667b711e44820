from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from way2pg import __version__
from way2pg.core.config import settings
from way2pg.core.database import init_db, close_db
from way2pg.core.exceptions import Way2PGError
from way2pg.core.logging_config import logger
from way2pg.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from way2pg.core.rate_limiter import limiter, rate_limit_exceeded_handler
from way2pg.api.v1.router import api_router


def validate_critical_config():
    """Fail fast when secrets are missing or left at placeholder values"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")
    if not settings.SECRET_KEY or settings.SECRET_KEY == "CHANGE_ME":
        errors.append("SECRET_KEY is not set or using default value")
    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        errors.append("JWT_SECRET_KEY is not set or using default value")

    if not settings.SENDGRID_API_KEY and not (settings.SMTP_USER and settings.SMTP_PASSWORD):
        warnings.append("No mail credentials - owner notifications and reset emails will be skipped")
    if not settings.MEDIA_BUCKET:
        warnings.append("MEDIA_BUCKET not set - image uploads will fail")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} API ({settings.ENVIRONMENT})")

    validate_critical_config()
    await init_db()
    logger.info("[Startup] Database tables ready")

    yield

    logger.info(f"Shutting down {settings.APP_NAME} API...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Student accommodation marketplace API",
    version=__version__,
    lifespan=lifespan,
    redirect_slashes=False,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Order matters - last added runs first
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE_MB * 1024 * 1024)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(Way2PGError)
async def way2pg_exception_handler(request: Request, exc: Way2PGError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=request.url.path, error_code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.public_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": errors[0]["message"] if errors else "Invalid input", "errors": errors},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


@app.get("/ping", tags=["Health"])
async def ping():
    return {"message": "pong"}


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": __version__,
        "environment": settings.ENVIRONMENT,
    }


app.include_router(api_router, prefix="/api")
