"""Planet Nine LMS API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from planetnine.auth.router import router as auth_router
from planetnine.auth.service import AuthService
from planetnine.certificates.router import admin_router as certificates_admin_router
from planetnine.certificates.router import router as certificates_router
from planetnine.certificates.service import CertificateService
from planetnine.config import get_settings
from planetnine.core.context import get_request_id
from planetnine.core.database import init_async_cassandra, shutdown_async_cassandra
from planetnine.core.exceptions import LmsError, status_code_for
from planetnine.core.logging import configure_structlog, get_logger
from planetnine.core.middleware import RequestContextMiddleware
from planetnine.core.redis import init_redis, shutdown_redis
from planetnine.courses.router import router as courses_router
from planetnine.courses.service import CourseService
from planetnine.enquiries.router import admin_router as enquiries_admin_router
from planetnine.enquiries.router import router as contact_router
from planetnine.enquiries.service import EnquiryService
from planetnine.enquiries.workflow import EnquiryConversionWorkflow
from planetnine.enrollments.router import admin_router as enrollments_admin_router
from planetnine.enrollments.router import dashboard_router
from planetnine.enrollments.router import router as enrollments_router
from planetnine.enrollments.router import tutor_router
from planetnine.enrollments.service import EnrollmentService
from planetnine.health.router import router as health_router
from planetnine.progress.router import router as progress_router
from planetnine.progress.service import ProgressService
from planetnine.quizzes.router import router as quizzes_router
from planetnine.quizzes.service import QuizService
from planetnine.quizzes.workflow import QuizWorkflow
from planetnine.testimonials.router import admin_router as testimonials_admin_router
from planetnine.testimonials.router import router as testimonials_router
from planetnine.testimonials.service import TestimonialService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def init_services(app: FastAPI, session, keyspace: str) -> None:
    """Build the service graph and attach it to ``app.state``.

    Services are created in dependency order; routers read them back
    through the ``*ServiceDep`` dependencies.
    """
    state = app.state
    state.cassandra_session = session

    state.auth_service = AuthService(session=session, keyspace=keyspace)
    state.course_service = CourseService(session=session, keyspace=keyspace)
    state.enquiry_service = EnquiryService(session=session, keyspace=keyspace)
    state.testimonial_service = TestimonialService(session=session, keyspace=keyspace)
    state.progress_service = ProgressService(
        session=session,
        keyspace=keyspace,
        course_service=state.course_service,
    )
    state.enrollment_service = EnrollmentService(
        session=session,
        keyspace=keyspace,
        progress_service=state.progress_service,
    )
    state.certificate_service = CertificateService(
        session=session,
        keyspace=keyspace,
        auth_service=state.auth_service,
        course_service=state.course_service,
        enrollment_service=state.enrollment_service,
    )
    state.quiz_service = QuizService(
        session=session,
        keyspace=keyspace,
        course_service=state.course_service,
        progress_service=state.progress_service,
    )

    state.quiz_workflow = QuizWorkflow(
        quiz_service=state.quiz_service,
        course_service=state.course_service,
        progress_service=state.progress_service,
        certificate_service=state.certificate_service,
    )
    state.conversion_workflow = EnquiryConversionWorkflow(
        auth_service=state.auth_service,
        course_service=state.course_service,
        enrollment_service=state.enrollment_service,
        enquiry_service=state.enquiry_service,
    )
    logger.info("services_initialized")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Initialize Redis (non-critical - forms are not throttled without it)
    try:
        await init_redis()
        logger.info("redis_initialized")
    except Exception as e:
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - form rate limiting disabled",
        )

    # Initialize Cassandra (async)
    try:
        session = await init_async_cassandra()
        logger.info("cassandra_initialized")
        init_services(app, session, settings.cassandra_keyspace)
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await shutdown_redis()
    await shutdown_async_cassandra()


def _error_body(
    request: Request, status_code: int, message: str, **extra
) -> ORJSONResponse:
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    return ORJSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "message": message,
            "status_code": status_code,
            "request_id": request_id,
            **extra,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain, HTTP, validation and unexpected errors to the JSON error body.

    SECURITY: stack traces are logged, never returned.
    """

    @app.exception_handler(LmsError)
    async def lms_error_handler(request: Request, exc: LmsError) -> ORJSONResponse:
        """Handle domain errors raised by services and workflows."""
        status_code = status_code_for(exc)
        logger.warning(
            "domain_error",
            error_type=type(exc).__name__,
            code=exc.code,
            status_code=status_code,
            path=request.url.path,
            method=request.method,
        )
        return _error_body(request, status_code, exc.message, code=exc.code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        message = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        return _error_body(request, exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors (field details are safe to expose)."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return _error_body(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error",
            details=[
                {
                    "field": ".".join(str(loc) for loc in err.get("loc", [])),
                    "message": err.get("msg", "Invalid value"),
                }
                for err in exc.errors()
            ],
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions (storage errors included)."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return _error_body(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Never let Starlette's ServerErrorMiddleware render tracebacks
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Planet Nine learning platform API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(courses_router)
    app.include_router(progress_router)
    app.include_router(quizzes_router)
    app.include_router(certificates_router)
    app.include_router(certificates_admin_router)
    app.include_router(enrollments_router)
    app.include_router(enrollments_admin_router)
    app.include_router(dashboard_router)
    app.include_router(tutor_router)
    app.include_router(contact_router)
    app.include_router(enquiries_admin_router)
    app.include_router(testimonials_router)
    app.include_router(testimonials_admin_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Planet Nine LMS API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
