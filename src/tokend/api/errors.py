"""Map tokend failures onto the JSON error envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import TokendError

logger = logging.getLogger(__name__)


def error_body(name: str, message: str) -> dict[str, dict[str, str]]:
    return {"error": {"name": name, "message": message}}


async def handle_tokend_error(request: Request, exc: TokendError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "Request failed: %s",
        exc,
        extra={"path": request.url.path, "error": type(exc).__name__},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(type(exc).__name__, str(exc)),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Invalid request payload", extra={"path": request.url.path})
    messages = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("ValidationError", messages or "Invalid request payload"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TokendError, handle_tokend_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]


__all__ = ["error_body", "register_exception_handlers"]
