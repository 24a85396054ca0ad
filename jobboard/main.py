"""
=============================================================================
Job Board - application entry point
=============================================================================

Wires the pieces together:
- settings check, logging and database on startup
- session cookie (flash notices), CORS and per-request logging
- conversion of domain exceptions into HTTP responses
- every router from jobboard.api, plus health endpoints

Run locally with ``uvicorn jobboard.main:app --reload`` or
``python -m jobboard.main``.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from jobboard import __version__
from jobboard.api import router
from jobboard.core.config import settings, validate_settings, is_production
from jobboard.core.database import init_db, close_db, check_db_health
from jobboard.core.exceptions import AuthorizationDenied
from jobboard.core.flash import set_flash
from jobboard.core.logging_config import (
    LoggingContextManager,
    get_logger,
    log_request,
    setup_logging,
)

logger = get_logger(__name__)


# =============================================================================
# Startup / shutdown
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    setup_logging()
    validate_settings()
    await init_db()

    logger.info(
        "Job board ready",
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
        version=__version__,
    )

    yield

    await close_db()
    logger.info("Job board stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__,
    description="""
    Job posts and the applications filed against them.

    * **Job posts**: open to everyone; list, create, edit, delete
    * **Applications**: nested under their post, optional CV upload
    * **Accounts**: sign up at `/users`, sign in at `/session`
    * **Admin**: `/admin/*`, admins only; everyone else is sent to `/sign_in`

    The token returned on sign-in is accepted as `Authorization: Bearer <token>`
    and is also stored in the `remember_token` cookie.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# Middleware
# =============================================================================

# Signed cookie holding flash notices across a redirect
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie="jobboard_session",
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=is_production(),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag each request with an id, time it and write the access log line."""
    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    with LoggingContextManager(request_id=request_id):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request crashed",
                method=request.method,
                path=request.url.path,
            )
            raise

        elapsed = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=elapsed * 1000,
            client_ip=request.client.host if request.client else None,
        )
        return response


# =============================================================================
# Error responses
# =============================================================================

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed input (wrong types, over-long title): 422 with one entry per field."""
    detail = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"status": "error", "message": "Validation error", "detail": detail},
    )


@app.exception_handler(AuthorizationDenied)
async def authorization_denied_handler(request: Request, exc: AuthorizationDenied):
    """The admin gate said no: leave a notice and send the caller to sign in."""
    set_flash(request, "notice", exc.message)
    return RedirectResponse(
        url=str(request.url_for("sign_in")),
        status_code=status.HTTP_302_FOUND,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        error_type=type(exc).__name__,
        path=request.url.path,
        request_id=getattr(request.state, "request_id", None),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "message": "Internal server error",
            "detail": str(exc) if settings.DEBUG else None,
        },
    )


app.include_router(router)


# =============================================================================
# Health
# =============================================================================

@app.get("/health", tags=["Health"], summary="Liveness probe")
async def health():
    return {"status": "healthy", "service": settings.PROJECT_NAME, "version": __version__}


@app.get("/health/detailed", tags=["Health"], summary="Readiness probe with database check")
async def health_detailed():
    database_ok = await check_db_health()
    state = "healthy" if database_ok else "unhealthy"

    return {
        "status": state,
        "service": settings.PROJECT_NAME,
        "version": __version__,
        "dependencies": {
            "database": {
                "status": state,
                "type": settings.DATABASE_URL.split(":", 1)[0],
            },
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "jobboard.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
