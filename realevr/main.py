"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from pathlib import Path
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import asyncio
import logging

from realevr.config import settings
from realevr.middleware import RequestLoggingMiddleware
from realevr.routers import auth, catalog, payments, properties, uploads, users
from realevr.services.auth import AuthService
from realevr.services.error_handler import ErrorHandlerService
from realevr.services.payment import FlutterwaveClient
from realevr.static import CachedStaticFiles, SPAStaticFiles
from realevr.storage import create_storage, run_autosave
from realevr.utils.exceptions import APIException

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


def create_upload_directories() -> None:
    """Create the upload root, the served images/ and tours/ directories and the staging area."""
    for path in (settings.upload_path, settings.image_upload_path, settings.tour_upload_path,
                 settings.incoming_upload_path):
        path.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Loads storage, creates the bootstrap admin and runs the autosave task.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    create_upload_directories()

    storage = create_storage(settings)
    await storage.load()
    app.state.storage = storage

    await AuthService(storage).ensure_bootstrap_admin(settings.admin_username, settings.admin_password)

    app.state.flutterwave = None
    if settings.flutterwave_secret_key:
        app.state.flutterwave = FlutterwaveClient(
            settings.flutterwave_secret_key,
            base_url=settings.flutterwave_base_url,
            timeout=settings.flutterwave_timeout
        )
    else:
        logger.warning("FLUTTERWAVE_SECRET_KEY is not set; payment endpoints are disabled")

    autosave = asyncio.create_task(run_autosave(storage, settings.autosave_interval))

    yield

    logger.info("Shutting down application")
    autosave.cancel()
    try:
        await autosave
    except asyncio.CancelledError:
        pass
    await storage.close()
    if app.state.flutterwave is not None:
        await app.state.flutterwave.aclose()


# Create FastAPI application instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Backend for the RealEVR real-estate listing and virtual-tour site.

    ## Features

    * **Listings**: browse, search, filter and rank properties by views or recency
    * **Virtual Tours**: upload a tour ZIP and get a hosted entry page per property
    * **Images**: property image uploads served with long-lived caching
    * **Payments**: Flutterwave property deposits and payment verification
    * **Authentication**: JWT bearer tokens with user, property manager and admin roles

    ## Authentication

    Use `/api/login` or `/api/register` to obtain a JWT token, then send it in the
    Authorization header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Authentication", "description": "Registration, login and current user"},
        {"name": "Users", "description": "User administration"},
        {"name": "Properties", "description": "Property listings, search and management"},
        {"name": "Catalog", "description": "Amenities and property types"},
        {"name": "Uploads", "description": "Property images and virtual tours"},
        {"name": "Payments", "description": "Flutterwave deposits and verification"},
        {"name": "Health", "description": "Service health"},
    ],
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Processing-Time"],
)

app.add_middleware(RequestLoggingMiddleware, api_prefix=settings.api_prefix)

# Include API routers
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(users.router, prefix=settings.api_prefix)
app.include_router(properties.router, prefix=settings.api_prefix)
app.include_router(catalog.router, prefix=settings.api_prefix)
app.include_router(uploads.router, prefix=settings.api_prefix)
app.include_router(payments.router, prefix=settings.api_prefix)


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors as 400s with field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle framework HTTP exceptions with structured error responses."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Liveness check reporting the active storage backend."""
    storage = getattr(request.app.state, "storage", None)
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "storage": type(storage).__name__ if storage is not None else None,
    }


# Uploaded media
create_upload_directories()
app.mount(
    "/uploads/images",
    CachedStaticFiles(directory=settings.image_upload_path, cache_control="public, max-age=86400"),
    name="images"
)
app.mount(
    "/uploads/tours",
    CachedStaticFiles(directory=settings.tour_upload_path, html=True, cache_control="public, max-age=3600"),
    name="tours"
)

# Pre-built front end, when configured
if settings.client_dist_dir and Path(settings.client_dist_dir).is_dir():
    app.mount("/", SPAStaticFiles(directory=settings.client_dist_dir, api_prefix=settings.api_prefix), name="client")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "realevr.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
