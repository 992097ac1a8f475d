"""FastAPI application factory for the tokend local API."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .. import __version__
from ..config import TokendSettings
from ..exceptions import FetchError
from ..providers.kms import DEFAULT_REGION
from .deps import close_storage_service, configure_dependencies, get_settings, get_storage_service
from .errors import register_exception_handlers
from .middleware import RequestLoggingMiddleware
from .routes import (
    cubbyhole_router,
    health_router,
    kms_router,
    secret_router,
    token_router,
    transit_router,
)

logger = logging.getLogger(__name__)


async def resolve_kms_region(settings: TokendSettings) -> None:
    """Fill in the KMS region from instance metadata when it is not configured."""

    if settings.kms.region:
        return
    storage = get_storage_service()
    try:
        settings.kms.region = await storage.context.metadata.region()
    except FetchError as exc:
        logger.warning(
            "Unable to resolve region from instance metadata, using %s",
            DEFAULT_REGION,
            extra={"error": str(exc)},
        )
        settings.kms.region = DEFAULT_REGION
    logger.info("Using KMS region %s", settings.kms.region)


def create_app(settings: TokendSettings | None = None) -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    if settings is not None:
        configure_dependencies(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: ARG001 - signature requirement
        await resolve_kms_region(get_settings())
        try:
            yield
        finally:
            await close_storage_service()

    app = FastAPI(
        title="tokend",
        description="Host-local agent serving leased secrets from the secret store",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.started_at = time.monotonic()

    register_exception_handlers(app)
    if get_settings().log.requests:
        app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router, prefix="/v1", tags=["health"])
    app.include_router(token_router, prefix="/v1/token", tags=["token"])
    app.include_router(secret_router, prefix="/v1/secret", tags=["secret"])
    app.include_router(cubbyhole_router, prefix="/v1/cubbyhole", tags=["cubbyhole"])
    app.include_router(transit_router, prefix="/v1/transit", tags=["transit"])
    app.include_router(kms_router, prefix="/v1/kms", tags=["kms"])

    return app


__all__ = ["create_app", "resolve_kms_region"]
