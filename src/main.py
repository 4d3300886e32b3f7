"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api import auth
from src.config import get_settings
from src.database import check_connection, engine, get_db
from src.exceptions import AuthAPIError
from src.services.validation import validation_error

settings = get_settings()

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    configure_logging()
    if settings.uses_default_secret:
        logger.warning(
            "JWT_SECRET is not set; using the development fallback secret. "
            "Tokens signed with it are not secure."
        )
    logger.info(f"Auth API {settings.app_version} starting ({settings.environment})")
    yield
    engine.dispose()
    logger.info("Database connections closed")


app = FastAPI(
    title="Auth API",
    description="User registration, login and session tokens",
    version=settings.app_version,
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log each request with its response status."""
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
    return response


@app.exception_handler(AuthAPIError)
async def auth_api_error_handler(request: Request, exc: AuthAPIError) -> JSONResponse:
    """Render application errors as ``{error, message, details?}``."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request model failures as a 400 listing every violation."""
    error = validation_error(exc.errors())
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Answer unknown routes with a uniform 404 body."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "Endpoint not found",
                "message": f"The endpoint {request.method} {request.url.path} was not found",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return a generic 500 without internal detail."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred",
        },
    )


# Register routers
app.include_router(auth.router)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


@app.get("/")
async def root():
    """Service banner."""
    return {
        "status": "OK",
        "message": "Auth API is running",
        "timestamp": _timestamp(),
        "version": settings.app_version,
    }


@app.get("/health")
def health_check(db: Annotated[Session, Depends(get_db)]):
    """Health check endpoint."""
    connected = check_connection(db)
    return {
        "status": "OK" if connected else "DEGRADED",
        "message": "Auth API is healthy" if connected else "Database is unreachable",
        "timestamp": _timestamp(),
        "database": "connected" if connected else "disconnected",
    }
