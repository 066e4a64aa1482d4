from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.sso_bridge.api.middlewares import setup_middlewares
from src.sso_bridge.api.v1.router import api_router, browser_router
from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.db import dispose_engine
from src.sso_bridge.core.exceptions import setup_exception_handlers
from src.sso_bridge.core.health import setup_health_endpoint, setup_metrics
from src.sso_bridge.core.identity_provider import IdentityProviderClient
from src.sso_bridge.core.logging import get_logger, setup_logging
from src.sso_bridge.core.rate_limit import limiter
from src.sso_bridge.core.redis import close_redis

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}")

    yield

    logger.info("Closing connections...")
    await app.state.identity_provider.aclose()
    await close_redis()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "session", "description": "Current tenant session"},
    {"name": "pages", "description": "Login and landing page data"},
]


def create_app(identity_provider: IdentityProviderClient | None = None) -> FastAPI:
    """Build the application.

    ``identity_provider`` replaces the default IdP client, which is how tests
    plug in an httpx mock transport.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Cross-domain single sign-on bridge for tenant domains",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    app.state.identity_provider = identity_provider or IdentityProviderClient(settings)
    app.state.limiter = limiter
    app.add_exception_handler(
        RateLimitExceeded,
        _rate_limit_exceeded_handler,  # type: ignore[arg-type]
    )

    setup_exception_handlers(app)
    setup_middlewares(app, settings)

    app.include_router(browser_router)
    app.include_router(api_router)

    setup_health_endpoint(app)
    setup_metrics(app)

    return app


app = create_app()
