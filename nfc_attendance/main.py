"""
Main FastAPI application for the NFC Attendance / Canteen tracker
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import logging.config

from nfc_attendance.config import Settings, settings as default_settings
from nfc_attendance.database import Database
from nfc_attendance.utils.errors import AppError

# Import API routes
from nfc_attendance.api import auth, devices, reports, scan, settings as settings_api, subjects

logger = logging.getLogger(__name__)


def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as {"error": message}"""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _format_validation_error(exc)}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"}
        )


def create_app(settings: Settings = None, database: Database = None) -> FastAPI:
    """
    Build the application.

    ``database`` may be injected (tests); otherwise one is created from
    ``settings.database_url`` when the application starts and disposed on
    shutdown.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting NFC Attendance service in {settings.SCAN_MODE} mode")

        missing = settings.validate_required_settings()
        if missing:
            logger.warning(f"Insecure or missing settings: {', '.join(missing)}")

        owns_database = app.state.database is None
        if owns_database:
            app.state.database = Database(settings.database_url)

        # This will create tables if they don't exist
        # In production, use Alembic migrations instead
        try:
            app.state.database.create_all()
            logger.info("Database tables initialized")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")

        yield

        logger.info("Shutting down NFC Attendance service")
        if owns_database:
            app.state.database.dispose()
            app.state.database = None

    app = FastAPI(
        title="NFC Attendance & Canteen Tracker",
        description="Badge scan ingestion for NFC readers with an admin API for devices, subjects, settings and reports",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "scan",
                "description": "Badge scans from NFC readers and scan history",
            },
            {
                "name": "authentication",
                "description": "Admin session login and logout",
            },
            {
                "name": "devices",
                "description": "NFC reader registration and token management",
            },
            {
                "name": "subjects",
                "description": "Employee and student directory",
            },
            {
                "name": "settings",
                "description": "Canteen order cutoff",
            },
            {
                "name": "reports",
                "description": "Monthly reports and dashboard statistics",
            },
        ]
    )
    app.state.settings = settings
    app.state.database = database

    # Add middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint for monitoring"""
        try:
            request.app.state.database.ping()
            return {
                "status": "healthy",
                "database": "connected",
                "mode": settings.SCAN_MODE,
                "version": "1.0.0"
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"error": "Service unavailable"}
            )

    for router in (auth.router, scan.router, devices.router, subjects.router, settings_api.router, reports.router):
        app.include_router(router, prefix=settings.API_PREFIX)

    return app


logging.config.dictConfig(default_settings.get_logging_config())

app = create_app()

if __name__ == "__main__":
    import uvicorn

    # Development server
    uvicorn.run(
        "nfc_attendance.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
        log_level=default_settings.LOG_LEVEL.lower()
    )
