from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import logging

from core.config import settings
from core.exceptions import BaseCustomException
from core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from core.response import error_response
from database.connection import Database
from routers import auth, categories, chat, dashboard, health, rating, shop, user
from services.storage import LocalBlobStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(BaseCustomException)
    async def custom_exception_handler(request: Request, exc: BaseCustomException):
        """Handle custom exceptions with standardized response format."""
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(f"Custom exception [{request_id}] on {request.method} {request.url}: {exc.message}")

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                message=exc.message,
                error_code=exc.__class__.__name__,
                details=exc.details
            )
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are client errors like any other missing field: 400."""
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(f"Validation error [{request_id}] on {request.method} {request.url}: {exc}")

        error_details = []
        for error in exc.errors():
            field = '.'.join(str(x) for x in error['loc'])
            error_details.append({
                "field": field,
                "message": error['msg'],
                "type": error['type']
            })

        return JSONResponse(
            status_code=400,
            content=error_response(
                message="Request validation failed",
                error_code="VALIDATION_ERROR",
                details={"errors": error_details}
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(f"HTTP exception [{request_id}] on {request.method} {request.url}: {exc.detail}")

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                message=str(exc.detail) if isinstance(exc.detail, str) else "HTTP error occurred",
                error_code="HTTP_ERROR"
            )
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(f"Unexpected error [{request_id}] on {request.method} {request.url}: {str(exc)}", exc_info=True)

        return JSONResponse(
            status_code=500,
            content=error_response(
                message="Internal server error",
                error_code="INTERNAL_SERVER_ERROR",
                details=str(exc) if settings.DEBUG else None
            )
        )


def create_app(database: Optional[Database] = None, blob_store: Optional[LocalBlobStore] = None) -> FastAPI:
    """Build the API around a storage gateway and a blob store (both injectable)."""
    app = FastAPI(
        title="Nearby Shops API",
        description="Shop directory, geosearch, chat and ratings backend",
        version="1.0.0"
    )
    app.state.database = database or Database()
    app.state.blob_store = blob_store or LocalBlobStore()

    register_exception_handlers(app)

    # Add custom middleware (order matters - first added is executed last)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Chat attachments are served back from the blob store root
    app.mount(
        "/uploads",
        StaticFiles(directory=str(app.state.blob_store.root), check_dir=False),
        name="uploads"
    )

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
    app.include_router(shop.router, prefix="/api/shops", tags=["Shops"])
    app.include_router(chat.router, prefix="/api/chats", tags=["Chats"])
    app.include_router(rating.router, prefix="/api/ratings", tags=["Ratings"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
    app.include_router(user.router, prefix="/api/user", tags=["User"])
    app.include_router(health.router, prefix="/api/health", tags=["Health"])

    @app.on_event("startup")
    async def startup_event():
        """Initialize the application on startup."""
        try:
            logger.info("Starting up Nearby Shops API...")
            app.state.database.create_tables()
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to start application: {str(e)}")
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.database.dispose()

    @app.get("/")
    def root():
        """Root endpoint for API health check."""
        return {
            "message": "Welcome to Nearby Shops API",
            "status": "healthy",
            "version": "1.0.0"
        }

    return app


app = create_app()
