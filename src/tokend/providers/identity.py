"""Clients for the instance-identity exchange that yields the bootstrap token."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any

import httpx

from ..config import MetadataSettings, WardenSettings
from ..exceptions import FetchError
from .http import BackendClient

IDENTITY_DOCUMENTS = ("document", "signature", "pkcs7")


class InstanceMetadata(BackendClient):
    """Reads the dynamic instance-identity documents from the EC2 metadata service."""

    service_name = "instance metadata"

    def __init__(
        self, settings: MetadataSettings, *, client: httpx.AsyncClient | None = None
    ) -> None:
        super().__init__(
            settings.host,
            timeout=settings.timeout,
            max_retries=2,
            retry_backoff_seconds=0.1,
            client=client,
        )

    async def identity(self) -> tuple[str, str, str]:
        """Return the identity document, its signature and its PKCS7 envelope."""

        document, signature, pkcs7 = await asyncio.gather(
            *(self._get(name) for name in IDENTITY_DOCUMENTS)
        )
        return document, signature, pkcs7

    async def region(self) -> str:
        """Return the region this instance runs in."""

        document = self.parse_document(await self._get("document"))
        region = document.get("region")
        if not isinstance(region, str) or not region:
            raise FetchError("Instance identity document does not name a region")
        return region

    @staticmethod
    def parse_document(raw: str) -> dict[str, Any]:
        try:
            document = json.loads(raw)
        except ValueError as exc:
            raise FetchError("Instance identity document is not valid JSON") from exc
        if not isinstance(document, dict):
            raise FetchError("Instance identity document is not a JSON object")
        return document

    async def _get(self, name: str) -> str:
        response = await self.request("GET", f"/latest/dynamic/instance-identity/{name}")
        return response.text


class WardenClient(BackendClient):
    """Posts attestation documents to Warden in exchange for a token."""

    service_name = "warden"

    def __init__(self, settings: WardenSettings, *, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(settings.address, timeout=settings.timeout, client=client)
        self.path = settings.path

    async def authenticate(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        response = await self.request(
            "POST",
            self.path,
            headers={"Content-Type": "application/json"},
            json=dict(payload),
        )
        body = self._json(response)
        if not isinstance(body, dict):
            raise FetchError(f"{response.status_code}: {response.text}")
        return body


__all__ = ["IDENTITY_DOCUMENTS", "InstanceMetadata", "WardenClient"]
