"""Thin client for the secret store's HTTP API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from ..config import VaultSettings
from ..exceptions import FetchError
from .http import BackendClient


class VaultClient(BackendClient):
    """Reads and writes ``/v1/<path>`` on behalf of a presented token."""

    service_name = "vault"

    def __init__(self, settings: VaultSettings, *, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(
            settings.address,
            timeout=settings.timeout,
            verify=settings.verify_ssl,
            max_retries=settings.max_retries,
            retry_backoff_seconds=settings.retry_backoff_seconds,
            client=client,
        )

    async def read(self, path: str, *, token: str) -> dict[str, Any]:
        return await self._call("GET", path, token=token)

    async def write(
        self, path: str, payload: Mapping[str, Any], *, token: str
    ) -> dict[str, Any]:
        return await self._call("POST", path, token=token, json=dict(payload))

    async def _call(
        self, method: str, path: str, *, token: str, json: Any = None
    ) -> dict[str, Any]:
        response = await self.request(
            method,
            f"/v1/{path.lstrip('/')}",
            headers=self._headers_for_token(token),
            json=json,
        )
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise FetchError(f"Unexpected vault response for '{path}'")
        return payload

    def _headers_for_token(self, token: str) -> dict[str, str]:
        return {"X-Vault-Token": token, "Accept": "application/json"}


__all__ = ["VaultClient"]
