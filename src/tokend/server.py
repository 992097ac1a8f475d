"""Process entry point: ``tokend``."""

from __future__ import annotations

import logging

import uvicorn

from .api import create_app
from .config import TokendSettings
from .log import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = TokendSettings()
    configure_logging(settings.log.level, settings.log.json_format)

    app = create_app(settings)
    logger.info(
        "Starting tokend",
        extra={"host": settings.service.host, "port": settings.service.port},
    )
    uvicorn.run(
        app,
        host=settings.service.host,
        port=settings.service.port,
        log_config=None,
        access_log=settings.log.requests,
    )


if __name__ == "__main__":
    main()
