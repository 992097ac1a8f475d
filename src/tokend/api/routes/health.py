"""Health endpoint reporting whether the bootstrap token is usable."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ... import __version__
from ...exceptions import BootstrapTokenError
from ..deps import StorageDep

router = APIRouter()


def _uptime_ms(request: Request) -> int:
    started = getattr(request.app.state, "started_at", None)
    if started is None:
        return 0
    return int((time.monotonic() - started) * 1000)


@router.get("/health")
async def health_check(request: Request, storage: StorageDep) -> JSONResponse:
    """Report OK once the default token is ready, 503 otherwise."""

    try:
        await storage.check_default_token()
    except BootstrapTokenError as exc:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": str(exc),
                "code": exc.code,
                "uptime": _uptime_ms(request),
                "version": __version__,
            },
        )
    return JSONResponse(
        content={
            "status": "OK",
            "code": status.HTTP_200_OK,
            "uptime": _uptime_ms(request),
            "version": __version__,
        }
    )


__all__ = ["router"]
