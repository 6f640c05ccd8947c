"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from notevault.api.v1 import router as api_router
from notevault.core.clock import Clock, utcnow
from notevault.core.config import Settings, get_settings
from notevault.core.database import build_engine, build_session_factory, init_db
from notevault.core.errors import NoteVaultError, ServerError, ValidationError
from notevault.services.csrf import CsrfTokenRegistry
from notevault.services.lockout import LockoutPolicy
from notevault.services.rate_limit import RateLimiter, rules_from_settings
from notevault.services.sweeper import PeriodicSweeper

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create dev tables and run the expiry sweepers for the life of the process."""
    if app.state.settings.APP_ENV == "dev":
        init_db(app.state.engine)
    sweepers = [
        PeriodicSweeper(
            "csrf-tokens", app.state.settings.SWEEP_INTERVAL_SECONDS, app.state.tokens.sweep
        ),
        PeriodicSweeper(
            "rate-limits", app.state.settings.SWEEP_INTERVAL_SECONDS, app.state.rate_limiter.sweep
        ),
    ]
    for sweeper in sweepers:
        sweeper.start()
    try:
        yield
    finally:
        for sweeper in sweepers:
            await sweeper.stop()


def describe_validation_error(exc: RequestValidationError) -> str:
    """First violated rule as "<field>: <message>", or a fixed message for an unreadable body."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Request body is not valid JSON"
    field = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")
    )
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI) -> None:
    """Render service errors as {"success": false, "error": ...} with extra detail fields."""

    @app.exception_handler(NoteVaultError)
    async def handle_service_error(request: Request, exc: NoteVaultError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            "%s %s -> %s %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            type(exc).__name__,
            exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message, **exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationError(describe_validation_error(exc))
        logger.warning(
            "%s %s -> %s %s: %s",
            request.method,
            request.url.path,
            error.status_code,
            type(error).__name__,
            error.message,
        )
        return JSONResponse(
            status_code=error.status_code,
            content={"success": False, "error": error.message},
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Store failure on %s %s", request.method, request.url.path)
        error = ServerError()
        return JSONResponse(
            status_code=error.status_code,
            content={"success": False, "error": error.message},
        )


def create_app(settings: Settings | None = None, clock: Clock = utcnow) -> FastAPI:
    """Build the app with its shared auth state (token registry, rate limiter, lockout)."""
    settings = settings or get_settings()
    app = FastAPI(
        title="NoteVault API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = clock
    app.state.engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.tokens = CsrfTokenRegistry(
        ttl=timedelta(minutes=settings.CSRF_TOKEN_TTL_MINUTES), clock=clock
    )
    app.state.rate_limiter = RateLimiter(rules_from_settings(settings), clock=clock)
    app.state.lockout = LockoutPolicy.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict:
        """Root route; minimal payload for discovery."""
        return {
            "message": "Notes API Server",
            "status": "running",
            "endpoints": {
                "notes": f"{settings.API_PREFIX}/notes",
                "search": f"{settings.API_PREFIX}/notes/search/:query",
                "note": f"{settings.API_PREFIX}/notes/:id",
            },
        }

    return app


app = create_app()
