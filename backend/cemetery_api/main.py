"""FastAPI application."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .context import REQUEST_ID_HEADER, RequestContextMiddleware
from .csrf import CSRFCookieMiddleware
from .database import Database
from .error_handlers import register_exception_handlers
from .rate_limit import (
    GLOBAL_LIMIT_MESSAGE,
    LOGIN_LIMIT_MESSAGE,
    CounterStore,
    FixedWindowRateLimiter,
    RateLimitMiddleware,
    build_store,
)
from .routers import auth, burials, contracts, customers, dashboard, financial, grants, inventory, system, work_orders

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    logger.info("Starting %s (env=%s)", settings.APP_NAME, settings.ENV)
    yield
    logger.info("Shutting down %s", settings.APP_NAME)
    app.state.db.dispose()


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    counter_store: Optional[CounterStore] = None,
) -> FastAPI:
    """Build the application with its pool, limiters and middleware.

    Every shared resource is constructed here and kept on ``app.state``;
    tests pass their own settings, database and counter store.
    """
    settings = settings or get_settings()
    # Production safety checks (fail closed on insecure CORS config).
    settings.check_production_safety()

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Backend API for cemetery operations",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = database or Database.from_settings(settings)
    store = counter_store or build_store(settings.REDIS_URL)
    app.state.rate_limiter = FixedWindowRateLimiter(
        store,
        name="global",
        limit=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        message=GLOBAL_LIMIT_MESSAGE,
    )
    app.state.login_limiter = FixedWindowRateLimiter(
        store,
        name="login",
        limit=settings.AUTH_RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
        message=LOGIN_LIMIT_MESSAGE,
    )

    register_exception_handlers(app)

    # Middleware runs in reverse order of registration:
    # CORS -> request context -> rate limit -> CSRF cookie -> routes.
    app.add_middleware(
        CSRFCookieMiddleware,
        cookie_name=settings.CSRF_COOKIE_NAME,
        max_age=settings.CSRF_COOKIE_MAX_AGE,
        secure=settings.is_production,
    )
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.rate_limiter,
        trust_proxy_headers=settings.TRUST_PROXY_HEADERS,
    )
    app.add_middleware(RequestContextMiddleware)

    # CORS
    cors_methods = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    # If you add new custom headers, whitelist them explicitly (required when using cookies + credentials).
    cors_headers = ["Authorization", "Content-Type", "X-CSRF-Token", "X-Request-Id"]
    if not settings.is_production:
        cors_headers = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=cors_methods,
        allow_headers=cors_headers,
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )

    # Include routers
    api = APIRouter(prefix=settings.API_PREFIX)
    api.include_router(system.router)
    api.include_router(auth.router)
    api.include_router(work_orders.router)
    api.include_router(inventory.router)
    api.include_router(financial.router)
    api.include_router(burials.router)
    api.include_router(contracts.router)
    api.include_router(grants.router)
    api.include_router(customers.router)
    api.include_router(dashboard.router)
    app.include_router(api)

    return app
