"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta

from fastapi import Depends, FastAPI, Request

from ipgeo_api.api import auth, ip_info
from ipgeo_api.api.dependencies import RateLimit
from ipgeo_api.api.errors import setup_exception_handlers
from ipgeo_api.api.middleware import register_middleware
from ipgeo_api.config import Settings, get_settings
from ipgeo_api.database import build_engine, build_session_factory
from ipgeo_api.logging_config import configure_logging
from ipgeo_api.schemas.common import HealthResponse
from ipgeo_api.services.ip_info import IPInfoService
from ipgeo_api.services.passwords import PasswordHasher
from ipgeo_api.services.rate_limit import InMemoryCounterStore, RateLimiter
from ipgeo_api.services.tokens import TokenService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    settings: Settings = app.state.settings
    if settings.uses_fallback_jwt_secret:
        logger.warning(
            "JWT_SECRET is not set: tokens are signed with the built-in development key "
            "and can be forged by anyone who knows it"
        )
    logger.info(f"Starting IP Geo API in {settings.environment} mode")
    yield
    # Counters are in-process only and vanish with the process
    app.state.counter_store.reset()
    app.state.db_engine.dispose()


def build_rate_limiters(settings: Settings, store: InMemoryCounterStore) -> dict[str, RateLimiter]:
    """Create the per-route-class limiters sharing one counter store."""
    return {
        "auth": RateLimiter(
            "auth",
            max_requests=settings.auth_rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
            store=store,
            message="Too many attempts, please try again later",
        ),
        "general": RateLimiter(
            "general",
            max_requests=settings.general_rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
            store=store,
            message="Too many requests, please try again later",
        ),
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with its services wired from settings."""
    settings = settings or get_settings()

    app = FastAPI(
        title="IP Geo API",
        description="User authentication and IP geolocation lookups",
        version="0.1.0",
        lifespan=lifespan,
    )

    counter_store = InMemoryCounterStore()
    app.state.settings = settings
    app.state.db_engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.db_engine)
    app.state.counter_store = counter_store
    app.state.rate_limiters = build_rate_limiters(settings, counter_store)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_service = TokenService(
        secret_key=settings.signing_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(minutes=settings.jwt_expiration_minutes),
    )
    app.state.ip_info_service = IPInfoService.from_settings(settings)

    register_middleware(app, settings)
    setup_exception_handlers(app)

    # Register routers
    app.include_router(auth.router)
    app.include_router(ip_info.router)

    @app.get(
        "/health",
        response_model=HealthResponse,
        dependencies=[Depends(RateLimit("general"))],
    )
    async def health_check(request: Request):
        """Health check endpoint."""
        current: Settings = request.app.state.settings
        return HealthResponse(
            status="healthy",
            environment=current.environment,
            timestamp=datetime.now(UTC).isoformat(),
        )

    return app


settings = get_settings()
configure_logging(settings)

app = create_app(settings)
