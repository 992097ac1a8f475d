"""Retrying async HTTP client shared by the backend adapters."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ..exceptions import (
    BackendAuthError,
    BackendUnavailableError,
    FetchError,
    SecretNotFoundError,
)


class BackendClient:
    """Lazily creates one ``httpx.AsyncClient`` and maps failures onto :class:`FetchError`."""

    service_name: str = "backend"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float,
        verify: bool = True,
        max_retries: int = 0,
        retry_backoff_seconds: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self._timeout = timeout
        self._verify = verify
        self._max_retries = max_retries
        self._retry_backoff_seconds = retry_backoff_seconds
        self._client: httpx.AsyncClient | None = client
        self._client_lock: asyncio.Lock = asyncio.Lock()
        self._logger: logging.Logger = logging.getLogger(__name__)

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        max_attempts = max(1, self._max_retries + 1)
        attempt = 0

        while attempt < max_attempts:
            attempt += 1
            try:
                client = await self._get_client()
                response = await client.request(method, url, headers=headers, json=json)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                message = f"{status}: {exc.response.text}"
                if status in {httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN}:
                    raise BackendAuthError(message) from exc
                if status == httpx.codes.NOT_FOUND:
                    raise SecretNotFoundError(message) from exc
                if status == httpx.codes.TOO_MANY_REQUESTS or 500 <= status < 600:
                    if attempt < max_attempts:
                        self._logger.debug(
                            "Retrying %s request",
                            self.service_name,
                            extra={"status_code": status, "attempt": attempt},
                        )
                        await asyncio.sleep(self._retry_delay(attempt))
                        continue
                raise FetchError(message) from exc
            except httpx.RequestError as exc:
                if attempt < max_attempts:
                    await asyncio.sleep(self._retry_delay(attempt))
                    continue
                raise BackendUnavailableError(
                    f"Unable to reach {self.service_name} at {self.base_url}"
                ) from exc

        raise BackendUnavailableError(f"Exceeded retry limit when contacting {self.service_name}")

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        base_url=self.base_url,
                        timeout=self._timeout,
                        verify=self._verify,
                        headers={"Accept": "application/json"},
                    )
        return self._client

    def _retry_delay(self, attempt: int) -> float:
        return self._retry_backoff_seconds * (2 ** (attempt - 1))

    def _json(self, response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"Failed to decode {self.service_name} response") from exc


__all__ = ["BackendClient"]
