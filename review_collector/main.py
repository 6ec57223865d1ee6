"""
FastAPI application entry point.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from review_collector.core.config import settings
from review_collector.core.middleware import RequestIdMiddleware, get_request_id
from review_collector.core.logging import logger
from review_collector.core.exceptions import AppException
from review_collector.schemas.error import ErrorResponse, ErrorDetail, ErrorCode, ERROR_CODE_TO_HTTP_STATUS
from review_collector.schemas.review import Store
from review_collector.adapters import AppStoreAdapter, GooglePlayAdapter
from review_collector.services.review_service import ReviewService
from review_collector.storage import create_storage

# Import routers
from review_collector.api import reviews


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up App Review Collector")

    # Falls back to in-memory storage if the database cannot be initialised
    storage = await create_storage()
    adapters = {
        Store.ANDROID: GooglePlayAdapter(),
        Store.IOS: AppStoreAdapter(),
    }
    app.state.review_service = ReviewService(storage, adapters)
    logger.info("Review service ready", extra={"backend": storage.backend_name})

    yield

    # Shutdown
    logger.info("Shutting down App Review Collector")
    await app.state.review_service.close()
    logger.info("Storage and adapters closed")


async def app_exception_handler(request: Request, exc: AppException):
    """
    Handle all custom application exceptions.

    Returns standardized error response with proper HTTP status code.
    """
    request_id = get_request_id()

    logger.warning(
        f"Application exception: {exc.error_code.value}",
        extra={
            "request_id": request_id,
            "error_code": exc.error_code.value,
            "error_message": exc.message,
            "details": exc.details,
        },
    )

    error_response = ErrorResponse(
        request_id=request_id,
        error=ErrorDetail(
            code=exc.error_code,
            message=exc.message,
            details=exc.details if exc.details else None,
        ),
    )

    status_code = ERROR_CODE_TO_HTTP_STATUS.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(by_alias=True, exclude_none=True),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle Pydantic validation errors (422).

    Returns standardized error response.
    """
    request_id = get_request_id()

    error_details = {
        "validation_errors": [
            {
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
    }

    logger.warning(
        "Validation error",
        extra={"request_id": request_id, "errors": error_details},
    )

    error_response = ErrorResponse(
        request_id=request_id,
        error=ErrorDetail(
            code=ErrorCode.INVALID_ARGUMENT,
            message="Request validation failed",
            details=error_details,
        ),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(by_alias=True, exclude_none=True),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle all uncaught exceptions.

    Returns standardized error response with 500 status.
    """
    request_id = get_request_id()

    logger.error(
        f"Uncaught exception: {str(exc)}",
        extra={"request_id": request_id, "exception_type": type(exc).__name__},
        exc_info=True,
    )

    error_response = ErrorResponse(
        request_id=request_id,
        error=ErrorDetail(
            code=ErrorCode.INTERNAL,
            message="Internal server error",
            details={"error": str(exc)} if settings.DEBUG else None,
        ),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(by_alias=True, exclude_none=True),
    )


def create_app(use_lifespan: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    With `use_lifespan=False` no storage or adapters are created; the
    caller is expected to put a review service on app.state.
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Collects Google Play and App Store reviews and exports them as CSV or JSON",
        lifespan=lifespan if use_lifespan else None,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    application.add_middleware(RequestIdMiddleware)

    application.add_exception_handler(AppException, app_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(Exception, general_exception_handler)

    application.include_router(reviews.router)

    @application.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - service info."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/docs",
        }

    return application


app = create_app()
