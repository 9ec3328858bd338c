"""
School Occurrence Reports API

Main FastAPI application: teachers and class leaders submit behavioral
occurrence reports for students, grouped by class; administrators manage
classes, bulk-import students and create user accounts.
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from config import Settings, get_settings, setup_logging
from database import build_engine, init_db, make_session_factory
from storage import (
    AdminOnlyError,
    DuplicateError,
    NotAuthenticatedError,
    NotFoundError,
    ValidationError,
    run_bootstrap,
)
from api import routers

logger = logging.getLogger(__name__)


# --------------- Lifespan ---------------

def _log_bootstrap_failure(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Bootstrap failed", exc_info=task.exception())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan handler - create tables, then reconcile baseline data.

    The reconciliation runs in a worker thread without blocking startup
    unless BOOTSTRAP_BLOCKING is set, so early requests may see an
    incomplete class list.
    """
    settings: Settings = app.state.settings
    init_db(app.state.engine)

    bootstrap_task = None
    if settings.run_bootstrap:
        if settings.bootstrap_blocking:
            await asyncio.to_thread(run_bootstrap, settings, app.state.session_factory)
        else:
            bootstrap_task = asyncio.create_task(
                asyncio.to_thread(run_bootstrap, settings, app.state.session_factory)
            )
            bootstrap_task.add_done_callback(_log_bootstrap_failure)
    yield
    if bootstrap_task is not None and not bootstrap_task.done():
        # Threads cannot be cancelled; let the reconciliation finish
        await asyncio.wait([bootstrap_task])
    app.state.engine.dispose()


# --------------- Exception handlers ---------------

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Schema violations are client errors with field-level messages."""
    return JSONResponse(status_code=400, content={"errors": jsonable_encoder(exc.errors())})


async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


async def admin_only_handler(request: Request, exc: AdminOnlyError):
    return JSONResponse(status_code=403, content={"detail": exc.message})


async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


async def duplicate_handler(request: Request, exc: DuplicateError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message, "field": exc.field})


async def global_exception_handler(request: Request, exc: Exception):
    """Unclassified failures are logged and hidden behind a generic 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# --------------- FastAPI app ---------------

def create_app(settings: Settings = None) -> FastAPI:
    """Build the application with the given (or environment) settings."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="School Occurrence Reports API",
        description="""
API for recording student behavior occurrences per class.

### Access levels
- **Public**: login, logout, setup diagnostics, health
- **Any signed-in user**: read classes, students, reports and the dashboard; submit reports; edit students
- **Administrators**: create classes, bulk-import students, create and list users
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url, echo=settings.debug)
    app.state.session_factory = make_session_factory(app.state.engine)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Signed cookie carrying the server-side session token
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="lax",
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(NotAuthenticatedError, not_authenticated_handler)
    app.add_exception_handler(AdminOnlyError, admin_only_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(DuplicateError, duplicate_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # Include routers
    for router in routers:
        app.include_router(router)

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint - API health check."""
        return {
            "status": "online",
            "service": "School Occurrence Reports API",
            "version": "1.0.0"
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
