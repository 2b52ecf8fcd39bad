import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from app.api.dependencies import get_attempt_runner
from app.api.deps import engine
from app.api.responses import error_response
from app.api.routers.bookings import router as bookings_router
from app.api.routers.health import router as health_router
from app.config import get_settings
from app.domain.errors import BookingPersistenceError, DomainError
from app.infrastructure.db.mysql_engine import create_schema

settings = get_settings()

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize DB tables (for dev/demo purposes)
    await create_schema(engine)
    # Build the shared supplier gateway and attempt runner before serving
    get_attempt_runner()
    yield
    # Let background booking attempts finish before shutting down
    await get_attempt_runner().drain()
    await engine.dispose()


app = FastAPI(
    title="Hotel Bookings API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    # BookingPersistenceError is already logged at CRITICAL by the writer
    if exc.http_status >= 500 and not isinstance(exc, BookingPersistenceError):
        logger.error(
            "Booking request failed",
            extra={"path": request.url.path, "error_code": exc.code, "error": exc.message},
        )
    elif exc.http_status < 500:
        logger.info(
            "Booking request rejected",
            extra={"path": request.url.path, "error_code": exc.code, "error": exc.message},
        )
    return error_response(exc.message, exc.http_status, exc.code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    message = ", ".join(f"{e['field']}: {e['message']}" for e in errors)
    return error_response(f"Validation failed: {message}", 400, "VALIDATION_ERROR", errors)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        },
    )

    return error_response(
        "An unexpected error occurred. Please contact support with the error_id if the issue persists.",
        500,
        "INTERNAL_ERROR",
        error_id=error_id,
    )


app.include_router(health_router, tags=["Health"])
app.include_router(bookings_router, prefix="/api/v1", tags=["Bookings"])
