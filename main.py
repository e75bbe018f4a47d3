"""
Authentication service — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from api.middleware import register_middleware
from auth.errors import register_error_handlers
from auth.routes import router as auth_router
from config.settings import Settings, config
from database.session import create_tables
from providers.registry import ProviderRegistry
from providers.routes import router as provider_router

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "sqlalchemy.engine"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


class HealthCheckResponse(BaseModel):
    status: str


def create_app(settings: Settings = config) -> FastAPI:
    app = FastAPI(
        title="Auth Service",
        version="1.0.0",
        description="Local and Google / Discord / GitHub sign-in with JWT sessions.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app, auth_prefix=settings.auth_prefix)
    register_error_handlers(app)

    # Routes (auth first so its fixed paths win over /{provider})
    app.include_router(auth_router, prefix=settings.auth_prefix)
    app.include_router(provider_router, prefix=settings.auth_prefix)

    @app.get("/health", response_model=HealthCheckResponse)
    async def health_check() -> HealthCheckResponse:
        return HealthCheckResponse(status="healthy")

    @app.on_event("startup")
    async def on_startup():
        registry = ProviderRegistry.from_settings(settings)
        logger.info("Sign-in providers: %s", registry.list_configured() or "none")

        if settings.create_tables:
            logger.info("Ensuring database tables exist…")
            await create_tables()

        if settings.enable_user_listing:
            logger.warning("GET %s/users is enabled and unauthenticated", settings.auth_prefix)

        logger.info("Application ready to accept requests.")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
