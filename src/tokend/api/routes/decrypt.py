"""Transit and KMS decryption."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...providers.kms import KMSProvider
from ...providers.transit import TransitProvider
from ...utils.correlation import create_correlation_id
from ..deps import StorageDep
from ..responses import CORRELATION_HEADER, decode_plaintext, lease_response
from ..schemas import KMSDecryptRequest, TransitDecryptRequest

logger = logging.getLogger(__name__)

transit_router = APIRouter()
kms_router = APIRouter()


@transit_router.post("/{token}/decrypt")
async def transit_decrypt(
    token: str, body: TransitDecryptRequest, storage: StorageDep
) -> JSONResponse:
    """Decrypt ``ciphertext`` with the named transit key."""

    result = await storage.lookup(token, body.model_dump(), TransitProvider)
    return lease_response(result, decode_plaintext(result.data))


@kms_router.post("/decrypt")
async def kms_decrypt(body: KMSDecryptRequest, storage: StorageDep) -> JSONResponse:
    """Decrypt a KMS ciphertext blob.

    KMS needs no secret store token, so the call skips the registry and goes
    straight to the provider.
    """

    provider = KMSProvider(body.model_dump(exclude_none=True), context=storage.context)
    correlation_id = create_correlation_id()
    result = await provider.initialize()
    logger.info(
        "Decrypted KMS ciphertext",
        extra={"region": provider.region, "correlation_id": correlation_id},
    )

    data = result.data
    if isinstance(data, Mapping):
        data = decode_plaintext({key.lower(): value for key, value in data.items()})
    return JSONResponse(content=data, headers={CORRELATION_HEADER: correlation_id})


__all__ = ["kms_router", "transit_router"]
