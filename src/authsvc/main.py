"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from authsvc.auth.google import GoogleIdentityVerifier
from authsvc.auth.jwt import TokenIssuer
from authsvc.auth.router import router as auth_router
from authsvc.auth.service import IdentityService
from authsvc.config import Settings, get_settings
from authsvc.database import Database
from authsvc.health.router import router as health_router
from authsvc.middleware import setup_middleware
from authsvc.presence.mirror import PresenceMirror
from authsvc.redis_client import close_redis, create_redis
from authsvc.users.router import router as users_router

logger = structlog.get_logger()


def build_services(app: FastAPI, settings: Settings) -> None:
    """Construct the database, presence store, token issuer and identity service."""
    database = Database(settings.database_url, schema=settings.db_schema, echo=settings.debug)
    redis = create_redis(settings.redis_url)
    tokens = TokenIssuer.from_settings(settings)

    app.state.database = database
    app.state.redis = redis
    app.state.token_issuer = tokens
    app.state.identity_service = IdentityService(
        db=database,
        tokens=tokens,
        verifier=GoogleIdentityVerifier.from_settings(settings),
        presence=PresenceMirror(redis),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    build_services(app, settings)
    logger.info("startup", environment=settings.environment, version=settings.app_version)

    yield

    await app.state.database.close()
    await close_redis(app.state.redis)
    logger.info("shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Auth Service",
        description="Email/password and Google Sign-In authentication with JWT sessions",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("authsvc.main:app", host="0.0.0.0", port=3001)  # noqa: S104
