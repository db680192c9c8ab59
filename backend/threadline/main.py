"""
Threadline - Main FastAPI Application
Conversation hierarchy and search service.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from .config import settings
from .database import init_db, close_db
from .exceptions import InvalidQueryError, StoreUnavailableError, StructuralIntegrityError
from .middleware.logging import LoggingMiddleware, get_logger
from .routers import conversations_router

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    await init_db()
    logger.info("startup_complete", app=settings.APP_NAME, version=settings.APP_VERSION)

    yield

    # Shutdown
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Hierarchical and searchable views over branched conversations",
    lifespan=lifespan
)

app.add_middleware(LoggingMiddleware)


@app.exception_handler(InvalidQueryError)
async def invalid_query_handler(request: Request, exc: InvalidQueryError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid query parameters",
            "field": exc.field,
            "detail": exc.message,
        },
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = exc.errors()[0]
    loc = error.get("loc") or ()
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid query parameters",
            "field": str(loc[-1]) if loc else "request",
            "detail": error.get("msg", "Invalid value"),
        },
    )


@app.exception_handler(StructuralIntegrityError)
async def structural_integrity_handler(request: Request, exc: StructuralIntegrityError):
    logger.error(
        "hierarchy_integrity_failure",
        path=request.url.path,
        conversation_ids=exc.conversation_ids,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Conversation hierarchy is inconsistent"},
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    return JSONResponse(
        status_code=503,
        content={"error": "Conversation store unavailable"},
    )


# Include routers
app.include_router(conversations_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION
    }
