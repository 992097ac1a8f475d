"""Process-wide singletons handed to route handlers."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from ..config import TokendSettings
from ..leases.storage import StorageService
from ..providers.context import ProviderContext

logger = logging.getLogger(__name__)

_settings: TokendSettings | None = None
_storage: StorageService | None = None


def configure_dependencies(settings: TokendSettings | None) -> None:
    """Pin the settings used to build the storage service."""

    global _settings, _storage
    _settings = settings
    _storage = None


def get_settings() -> TokendSettings:
    """Provide a singleton TokendSettings instance."""

    global _settings
    if _settings is None:
        _settings = TokendSettings()
    return _settings


def get_storage_service() -> StorageService:
    """Provide a singleton StorageService wired from settings."""

    global _storage
    if _storage is None:
        settings = get_settings()
        _storage = StorageService(
            settings.service.storage_timeout_ms,
            context=ProviderContext.from_settings(settings),
            renew_ceiling=settings.vault.token_renew_increment or None,
        )
        logger.debug(
            "Storage service created",
            extra={"timeout_ms": settings.service.storage_timeout_ms},
        )
    return _storage


async def close_storage_service() -> None:
    """Close the storage service, if one was created."""

    global _storage
    if _storage is not None:
        await _storage.close()
        _storage = None


SettingsDep = Annotated[TokendSettings, Depends(get_settings)]
StorageDep = Annotated[StorageService, Depends(get_storage_service)]


__all__ = [
    "SettingsDep",
    "StorageDep",
    "close_storage_service",
    "configure_dependencies",
    "get_settings",
    "get_storage_service",
]
