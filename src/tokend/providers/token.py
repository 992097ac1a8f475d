"""Bootstrap token obtained by trading the instance identity for a secret store token."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..exceptions import FetchError
from .base import LeaseResult
from .context import ProviderContext

logger = logging.getLogger(__name__)


class TokenProvider:
    """Fetches the agent's own token through Warden and renews it against the store.

    ``secret`` and ``token`` are accepted for signature compatibility with the
    other providers and ignored: the bootstrap token depends on nothing but the
    instance identity.
    """

    def __init__(
        self,
        secret: Any = None,
        token: str | None = None,
        context: ProviderContext | None = None,
    ) -> None:
        self._context = context or ProviderContext.from_settings()
        self.token: str | None = None

    async def initialize(self) -> LeaseResult:
        document, signature, pkcs7 = await self._context.metadata.identity()
        response = await self._context.warden.authenticate(
            {
                "document": self._context.metadata.parse_document(document),
                "signature": signature,
                "pkcs7": pkcs7,
            }
        )

        token = _extract_token(response)
        if not token:
            raise FetchError("Warden response did not include a token")
        self.token = token

        return LeaseResult(
            data={"token": token},
            lease_duration=_lease_duration(response),
            max_ttl=_max_ttl(response),
        )

    async def renew(self) -> LeaseResult:
        if not self.token:
            raise FetchError("Token has not been initialized")

        increment = self._context.settings.vault.token_renew_increment
        payload: dict[str, Any] = {"increment": int(increment)} if increment else {}
        response = await self._context.vault.write(
            "auth/token/renew-self", payload, token=self.token
        )
        auth = response.get("auth")
        if not isinstance(auth, dict):
            raise FetchError("Token renewal response did not include auth data")

        self.token = auth.get("client_token") or self.token
        return LeaseResult(
            data={"token": self.token},
            lease_duration=auth.get("lease_duration") or 0,
        )

    def invalidate(self) -> None:
        self.token = None


def _extract_token(response: dict[str, Any]) -> str | None:
    data = response.get("data")
    if isinstance(data, dict) and isinstance(data.get("token"), str):
        return data["token"]
    client_token = response.get("client_token")
    return client_token if isinstance(client_token, str) else None


def _lease_duration(response: dict[str, Any]) -> float:
    value = response.get("lease_duration")
    return float(value) if isinstance(value, (int, float)) and value > 0 else 0.0


def _max_ttl(response: dict[str, Any]) -> float | None:
    created = response.get("creation_time")
    expires = response.get("expiration_time")
    if not isinstance(created, str) or not isinstance(expires, str):
        return None
    try:
        ttl = (datetime.fromisoformat(expires) - datetime.fromisoformat(created)).total_seconds()
    except ValueError:
        logger.warning(
            "Ignoring unparseable token expiration metadata",
            extra={"creation_time": created, "expiration_time": expires},
        )
        return None
    return ttl if ttl > 0 else None


__all__ = ["TokenProvider"]
