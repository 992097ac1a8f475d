"""Capability contract every secret provider satisfies."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, TypeAlias

from pydantic import BaseModel, ConfigDict, Field


class LeaseResult(BaseModel):
    """What a provider hands back from ``initialize()`` or ``renew()``."""

    model_config = ConfigDict(extra="allow")

    data: Any = None
    lease_duration: float = Field(default=0, ge=0, description="Validity window in seconds")
    renewable: bool | None = Field(
        default=None,
        description="Set to False when the backend says this lease cannot be renewed",
    )
    max_ttl: float | None = Field(
        default=None,
        gt=0,
        description="Hard ceiling (seconds since issue) past which the grant must be re-issued",
    )


ProviderOutput: TypeAlias = LeaseResult | Mapping[str, Any]


class Provider(Protocol):
    """A fetcher for one category of secret.

    ``initialize()`` is required. Providers may also define ``async renew()``
    with the same return shape, and ``invalidate()`` to drop any locally cached
    value. A provider without ``renew`` is never renewable.
    """

    async def initialize(self) -> ProviderOutput:  # pragma: no cover - protocol
        ...


def is_renewable(provider: object) -> bool:
    """Return whether ``provider`` exposes a renew capability."""

    return callable(getattr(provider, "renew", None))


__all__ = ["LeaseResult", "Provider", "ProviderOutput", "is_renewable"]
