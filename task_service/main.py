"""
Task Service - application factory and HTTP entry point.
"""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .core.auth import BearerAuthMiddleware
from .core.config import Settings, get_settings
from .core.database import create_db_engine, create_session_factory, init_db
from .core.errors import InputError, TaskServiceError, format_validation_errors
from .core.logging_config import setup_logging
from .repositories.tasks import SQLTaskRepository, TaskRepository
from .routers import tasks

logger = logging.getLogger(__name__)

QUIET_PATHS = {"/", "/health"}


def _input_error_from_validation(exc: RequestValidationError) -> InputError:
    """Map FastAPI request validation failures onto 400 input errors"""
    errors = exc.errors()

    for error in errors:
        loc = tuple(error.get("loc", ()))
        if loc[:1] == ("path",):
            label = "user" if loc[-1] == "user_id" else "task"
            return InputError(
                f"Invalid {label} ID format",
                f"{label.capitalize()} ID must be an integer"
            )

    for error in errors:
        loc = tuple(error.get("loc", ()))
        if error.get("type") == "json_invalid" or loc == ("body",):
            reason = error.get("ctx", {}).get("error") or error.get("msg", "malformed body")
            return InputError("Invalid request body", str(reason))

    return InputError("Invalid input data", format_validation_errors(errors))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskServiceError)
    async def task_service_error_handler(request: Request, exc: TaskServiceError):
        """Render tagged service errors"""
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed bodies, failed validation and bad path ids"""
        error = _input_error_from_validation(exc)
        logger.warning(f"{error.message} on {request.method} {request.url.path}: {error.details}")
        return JSONResponse(status_code=error.status_code, content=error.to_response())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions"""
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"}
        )


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[TaskRepository] = None
) -> FastAPI:
    """
    Build the Task Service application.

    Args:
        settings: Settings to use, defaults to the environment-backed instance
        repository: Storage accessor; when omitted a SQL repository is built
            from settings and the app owns its engine lifecycle

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    engine = None
    if repository is None:
        engine = create_db_engine(settings)
        repository = SQLTaskRepository(create_session_factory(engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Task Service...")
        if engine is not None:
            if init_db(engine):
                logger.info("Database initialized successfully")
            else:
                logger.error("Database initialization failed")
        logger.info("Task Service startup completed")
        yield
        logger.info("Shutting down Task Service...")
        if engine is not None:
            engine.dispose()
        logger.info("Task Service shutdown completed")

    app = FastAPI(
        title="Task Service",
        description="Microservice for task management with bearer token authorization",
        version=settings.service_version,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.task_repository = repository

    if not settings.auth_token:
        logger.warning("AUTH_TOKEN is not set - all API requests will be rejected")

    app.add_middleware(BearerAuthMiddleware, token=settings.auth_token, prefix=settings.api_prefix)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        """Log all requests with timing"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if request.url.path not in QUIET_PATHS:
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)"
            )
        return response

    # Outermost, so preflight requests are answered before authorization
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
        expose_headers=settings.expose_headers,
        max_age=settings.cors_max_age,
    )

    register_exception_handlers(app)
    app.include_router(tasks.router, prefix=settings.api_prefix, tags=["tasks"])

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        """Root endpoint"""
        return "Server is running!"

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        db_healthy = app.state.task_repository.ping()
        return {
            "service": settings.service_name,
            "version": settings.service_version,
            "status": "healthy" if db_healthy else "unhealthy",
            "database": "connected" if db_healthy else "disconnected",
            "timestamp": time.time()
        }

    return app


def run() -> None:
    """Serve the application with uvicorn"""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "task_service.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
