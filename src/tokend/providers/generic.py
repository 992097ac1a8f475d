"""Key/value secret reads.

Key/value secrets are persistent and cannot be renewed in the backend, so
``renew()`` simply re-reads the path. The lease manager only schedules that
re-read once half the reported lease has passed, which keeps us from polling
the store for data that cannot have changed its validity.
"""

from __future__ import annotations

from typing import Any, ClassVar

from ..exceptions import ConfigurationError
from .base import LeaseResult
from .context import ProviderContext


class GenericProvider:
    """Reads a secret at an arbitrary ``mount/path``."""

    mount: ClassVar[str | None] = None

    def __init__(self, secret: Any, token: str | None, context: ProviderContext | None = None) -> None:
        if not isinstance(secret, str) or not secret.strip("/"):
            raise ConfigurationError("path is required")
        if not token:
            raise ConfigurationError("token is required")

        path = secret.strip("/")
        self.path = f"{self.mount}/{path}" if self.mount else path
        self.token = token
        self.data: LeaseResult | None = None
        self._context = context or ProviderContext.from_settings()

    async def initialize(self) -> LeaseResult:
        if self.data is not None:
            return self.data
        return await self._retrieve()

    async def renew(self) -> LeaseResult:
        return await self._retrieve()

    def invalidate(self) -> None:
        self.data = None

    async def _retrieve(self) -> LeaseResult:
        response = await self._context.vault.read(self.path, token=self.token)
        self.data = LeaseResult(
            data=response.get("data"),
            lease_duration=response.get("lease_duration") or 0,
        )
        return self.data


class SecretProvider(GenericProvider):
    """Static secrets under the ``secret/`` mount."""

    mount = "secret"


class CubbyholeProvider(GenericProvider):
    """Per-token secrets under the ``cubbyhole/`` mount."""

    mount = "cubbyhole"


__all__ = ["CubbyholeProvider", "GenericProvider", "SecretProvider"]
