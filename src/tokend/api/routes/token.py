"""The agent's own bootstrap token."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...leases.storage import DEFAULT_TOKEN_SECRET
from ..deps import StorageDep
from ..responses import lease_response

router = APIRouter()


@router.get("/default")
async def default_token(storage: StorageDep) -> JSONResponse:
    result = await storage.lookup(DEFAULT_TOKEN_SECRET, DEFAULT_TOKEN_SECRET, storage.token_provider)
    return lease_response(result)


__all__ = ["router"]
