"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cpn.achievements.router import router as achievements_router
from cpn.config import get_settings
from cpn.database import close_db, init_db
from cpn.entries.router import router as entries_router
from cpn.girls.router import router as girls_router
from cpn.health.router import router as health_router
from cpn.leaderboards.router import router as leaderboards_router
from cpn.middleware import setup_middleware
from cpn.onboarding.router import router as onboarding_router
from cpn.redis_client import close_redis, init_redis
from cpn.session.router import router as session_router
from cpn.users.router import router as settings_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="CPN API",
        description="Backend API for CPN — cost-per-nut tracking with anonymous sessions",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(session_router)
    app.include_router(girls_router)
    app.include_router(entries_router)
    app.include_router(settings_router)
    app.include_router(onboarding_router)
    app.include_router(achievements_router)
    app.include_router(leaderboards_router)

    return app


app = create_app()
