"""Key/value reads under the ``secret/`` and ``cubbyhole/`` mounts."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...providers.generic import CubbyholeProvider, SecretProvider
from ..deps import StorageDep
from ..responses import lease_response

secret_router = APIRouter()
cubbyhole_router = APIRouter()


@secret_router.get("/{token}/{path:path}")
async def read_secret(token: str, path: str, storage: StorageDep) -> JSONResponse:
    """Return the data stored at ``secret/<path>``."""

    return lease_response(await storage.lookup(token, path, SecretProvider))


@cubbyhole_router.get("/{token}/{path:path}")
async def read_cubbyhole(token: str, path: str, storage: StorageDep) -> JSONResponse:
    """Return the data stored at ``cubbyhole/<path>``."""

    return lease_response(await storage.lookup(token, path, CubbyholeProvider))


__all__ = ["cubbyhole_router", "secret_router"]
