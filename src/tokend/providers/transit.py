"""Decrypt ciphertext with the secret store's transit backend."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..exceptions import ConfigurationError
from .base import LeaseResult
from .context import ProviderContext


class TransitProvider:
    """Single-shot transit decryption; there is no lease to renew."""

    def __init__(self, secret: Any, token: str | None, context: ProviderContext | None = None) -> None:
        if not isinstance(secret, Mapping) or not secret:
            raise ConfigurationError("secret is required")
        if not secret.get("key"):
            raise ConfigurationError("secret.key is required")
        if not secret.get("ciphertext"):
            raise ConfigurationError("secret.ciphertext is required")
        if not token:
            raise ConfigurationError("token is required")

        self._key = str(secret["key"])
        self._ciphertext = str(secret["ciphertext"])
        self._token = token
        self._plaintext: LeaseResult | None = None
        self._context = context or ProviderContext.from_settings()

    async def initialize(self) -> LeaseResult:
        if self._plaintext is not None:
            return self._plaintext
        return await self._decrypt()

    def invalidate(self) -> None:
        self._plaintext = None

    async def _decrypt(self) -> LeaseResult:
        response = await self._context.vault.write(
            f"transit/decrypt/{self._key}",
            {"ciphertext": self._ciphertext},
            token=self._token,
        )
        self._plaintext = LeaseResult(
            data=response.get("data"),
            lease_duration=response.get("lease_duration") or 0,
            renewable=False,
        )
        return self._plaintext


__all__ = ["TransitProvider"]
