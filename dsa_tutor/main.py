# FastAPI application entry point for the DSA tutor chat API

import os
from datetime import datetime, timezone
from dotenv import load_dotenv
from fastapi import FastAPI, Request, HTTPException

# Load environment variables from .env file
load_dotenv()
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from dsa_tutor.api.v1.session_router import router as session_router
from dsa_tutor.api.v1.message_router import router as message_router
from dsa_tutor.config.database import init_database, check_database_connection
from dsa_tutor.config.settings import get_app_config
from dsa_tutor.exceptions import (
    TutorException,
    ValidationError,
    NotFoundError,
    AuthenticationError
)
from dsa_tutor.services.generation_provider import create_generation_provider
from dsa_tutor.utils.logging_config import setup_logging, get_logger, log_error_context

APP_VERSION = "1.0.0"

# Setup logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE", "logs/dsa_tutor.log")
logger = setup_logging(log_level=log_level, log_file=log_file)

config = get_app_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting DSA Tutor Chat API")
    logger.info(f"Log level: {log_level}")
    logger.info(f"Log file: {log_file}")
    logger.debug(f"Configuration: {config.to_dict()}")

    # Initialize database and create tables
    try:
        init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    if not config.auth.secret_key:
        logger.warning("JWT_KEY not set - all authenticated requests will be rejected")

    # One provider instance shared by every request
    app.state.generation_provider = create_generation_provider(config.provider)

    yield

    # Shutdown
    logger.info("Shutting down DSA Tutor Chat API")


app = FastAPI(
    title="DSA Tutor Chat API",
    description="Session-based DSA tutoring chat with Gemini and a local fallback responder",
    version=APP_VERSION,
    lifespan=lifespan
)

# The frontend sends the auth cookie, so credentials must be allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(session_router)
app.include_router(message_router)


@app.get("/")
async def read_root():
    return {"message": "DSA Tutor Chat API is running"}


def _request_context(request: Request) -> dict:
    return {
        "method": request.method,
        "url": str(request.url),
        "client_ip": request.client.host if request.client else "unknown"
    }


# Global exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with proper logging."""
    context = {**_request_context(request), "status_code": exc.status_code}

    if exc.status_code >= 500:
        log_error_context(logger, exc, context)
    else:
        logger.warning(f"HTTP {exc.status_code}: {exc.detail}", extra=context)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": f"HTTP_{exc.status_code}"
        },
        headers=getattr(exc, "headers", None)
    )


TUTOR_EXCEPTION_STATUS = {
    ValidationError: 400,
    AuthenticationError: 401,
    NotFoundError: 404,
}


@app.exception_handler(TutorException)
async def tutor_exception_handler(request: Request, exc: TutorException):
    """Handle application exceptions that escaped the routers."""
    status_code = 500
    for exc_type, code in TUTOR_EXCEPTION_STATUS.items():
        if isinstance(exc, exc_type):
            status_code = code
            break

    context = _request_context(request)
    if status_code >= 500:
        log_error_context(logger, exc, context)
        detail = "Internal server error"
        if config.is_development:
            detail = f"Internal server error: {exc.message}"
    else:
        logger.warning(f"{exc.error_code}: {exc.message}", extra=context)
        detail = exc.message

    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error_code": exc.error_code}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with comprehensive logging."""
    context = {
        **_request_context(request),
        "user_agent": request.headers.get("user-agent", "unknown")
    }

    log_error_context(logger, exc, context)

    # Don't expose internal error details in production
    error_detail = "Internal server error"
    if config.is_development:
        error_detail = f"Internal server error: {str(exc)}"

    return JSONResponse(
        status_code=500,
        content={
            "detail": error_detail,
            "error_code": "INTERNAL_SERVER_ERROR"
        }
    )


@app.get("/health")
async def health_check(request: Request):
    """Health check reporting provider and database status."""
    provider = getattr(request.app.state, "generation_provider", None)
    provider_status = "configured" if provider is not None and provider.configured else "fallback_only"
    database_ok = check_database_connection()

    health_info = {
        "status": "healthy" if database_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "generation_provider": provider_status,
            "database": "connected" if database_ok else "unavailable",
            "logging": "active"
        },
        "version": APP_VERSION
    }

    logger.debug("Health check requested", extra={"health_status": health_info["status"]})

    if not database_ok:
        return JSONResponse(status_code=503, content=health_info)
    return health_info
