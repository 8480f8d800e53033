import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from directory_app.config import settings
from directory_app.database.connection import engine, Base
from directory_app.errors import (
    AuthorizationError,
    DirectoryError,
    NotFoundError,
    ReferentialConflictError,
    TransientStoreError,
    ValidationError,
)
from directory_app.schemas.error import ErrorResponse, ErrorType
from directory_app.api.v1 import analytics, catalog, categories, favorites, redirect, tools

# Import models to ensure they're registered with Base
from directory_app.models import Category, Tool, Favorite, ClickEvent, Profile

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A directory of AI tools with favorites and click analytics",
    debug=settings.debug
)


def _error_type(exc: DirectoryError) -> ErrorType:
    if isinstance(exc, AuthorizationError):
        if exc.authenticated:
            return ErrorType.AUTHORIZATION_ERROR
        return ErrorType.AUTHENTICATION_ERROR
    if isinstance(exc, ValidationError):
        return ErrorType.VALIDATION_ERROR
    if isinstance(exc, NotFoundError):
        return ErrorType.NOT_FOUND
    if isinstance(exc, ReferentialConflictError):
        return ErrorType.CONFLICT
    if isinstance(exc, TransientStoreError):
        return ErrorType.STORE_UNAVAILABLE
    return ErrorType.INTERNAL_ERROR


@app.exception_handler(DirectoryError)
async def directory_error_handler(request: Request, exc: DirectoryError):
    """Turn domain errors into the standard ErrorResponse body"""
    if isinstance(exc, TransientStoreError):
        logger.warning("%s %s: %s", request.method, request.url.path, exc.detail)

    body = ErrorResponse(
        error_type=_error_type(exc),
        message=exc.message,
        detail=exc.detail,
        status_code=exc.status_code,
        path=request.url.path,
        field=getattr(exc, "field", None),
        dependent_tools=getattr(exc, "dependent_tools", None),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
    )


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(catalog.router, prefix="/api/v1")
app.include_router(categories.router, prefix="/api/v1")
app.include_router(tools.router, prefix="/api/v1")
app.include_router(favorites.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")
app.include_router(redirect.router)
