"""
HealthGuard Alert Hub - FastAPI Application Entry Point

Citizens report disease symptoms and drainage problems. Each report is
stored immediately and classified for outbreak risk in the background;
High and Critical risk raises an outbreak alert. Field workers and
authorities see the same map with reporter identity attached.

DESIGN PRINCIPLES:
- Submission never waits on the AI
- AI output is validated strictly; failures leave the report unclassified
- Roles are resolved on the server, identity is redacted on the server
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.settings import settings
from app.routes import health, infrastructure, map, reporters, reports
from app.services.ai_plugin import select_provider
from app.services.classification_orchestrator import ClassificationOrchestrator
from app.services.errors import HealthGuardError, NotFound, PermissionDenied, ValidationError
from app.services.risk_classifier import RiskClassifier
from app.services.status_workflow import InvalidTransition
from app.store import build_store
from app.store.base import ReportStore

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def _write_banner(title: str, request: Request, *lines: str) -> None:
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.write(f"🔥 {title}\n")
    sys.stderr.write(f"Path: {request.url.path}\n")
    sys.stderr.write(f"Method: {request.method}\n")
    for line in lines:
        sys.stderr.write(line)
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.flush()


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.message, "field": exc.field}
        )

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(PermissionDenied)
    async def permission_denied_handler(request: Request, exc: PermissionDenied):
        logger.warning(f"🚫 {request.method} {request.url.path} denied: {exc}")
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})

    @app.exception_handler(InvalidTransition)
    async def invalid_transition_handler(request: Request, exc: InvalidTransition):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.exception_handler(HealthGuardError)
    async def service_error_handler(request: Request, exc: HealthGuardError):
        logger.error(f"❌ {request.method} {request.url.path} failed: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Internal server error: {str(exc)}"}
        )

    # Pydantic validation error handler
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        _write_banner("VALIDATION ERROR HANDLER", request, f"Errors: {exc.errors()}\n")
        errors = exc.errors()
        field = None
        if errors:
            loc = [str(part) for part in errors[0].get("loc", ()) if part not in ("body", "query", "path", "header")]
            field = ".".join(loc) or None
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_errors(errors), "field": field}
        )

    # Global exception handler to catch ALL exceptions
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions and log them with full traceback."""
        _write_banner(
            "GLOBAL EXCEPTION HANDLER CAUGHT EXCEPTION",
            request,
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Internal server error: {str(exc)}"}
        )


def jsonable_errors(errors):
    """Pydantic error entries may carry exception objects in ctx."""
    cleaned = []
    for error in errors:
        entry = {key: value for key, value in error.items() if key != "ctx"}
        if "ctx" in error:
            entry["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        cleaned.append(entry)
    return cleaned


def create_app(
    store: Optional[ReportStore] = None,
    classifier: Optional[RiskClassifier] = None,
    orchestrator: Optional[ClassificationOrchestrator] = None,
) -> FastAPI:
    """
    Build the application.

    Anything not passed in is created from settings when the app starts:
    the store from USE_MOCK_DB, the classifier from AI_PROVIDER.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

        app.state.store = store if store is not None else build_store()
        if orchestrator is not None:
            app.state.orchestrator = orchestrator
        else:
            app.state.orchestrator = ClassificationOrchestrator(
                app.state.store,
                classifier if classifier is not None else RiskClassifier(select_provider()),
            )

        await app.state.orchestrator.start()
        try:
            yield
        finally:
            await app.state.orchestrator.stop()
            logger.info(f"Shutting down {settings.APP_NAME}")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Outbreak risk alerts from citizen health and sanitation reports",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # CORS - only the configured frontends, never "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(reports.router)
    app.include_router(map.router)
    app.include_router(reporters.router)
    app.include_router(infrastructure.router)

    # Root endpoint
    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
            "map": "/map"
        }

    return app


app = create_app()
