"""Shared backend clients handed to every provider."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import TokendSettings
from .identity import InstanceMetadata, WardenClient
from .vault import VaultClient


@dataclass(slots=True)
class ProviderContext:
    """Settings plus the HTTP clients providers use to reach their backends."""

    settings: TokendSettings
    vault: VaultClient
    metadata: InstanceMetadata
    warden: WardenClient

    @classmethod
    def from_settings(cls, settings: TokendSettings | None = None) -> ProviderContext:
        resolved = settings or TokendSettings()
        return cls(
            settings=resolved,
            vault=VaultClient(resolved.vault),
            metadata=InstanceMetadata(resolved.metadata),
            warden=WardenClient(resolved.warden),
        )

    async def close(self) -> None:
        await self.vault.close()
        await self.metadata.close()
        await self.warden.close()


__all__ = ["ProviderContext"]
