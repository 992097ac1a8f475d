"""Canonical cache keys for lease managers."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


def provider_kind_name(provider_kind: Any) -> str:
    return getattr(provider_kind, "__name__", type(provider_kind).__name__)


def canonical_secret(secret: Any) -> str:
    """Render ``secret`` so that equal descriptors always produce the same text.

    Plain paths are used as-is. Structured descriptors are serialized with
    their fields sorted, so ``{"key": "K", "ciphertext": "C"}`` and
    ``{"ciphertext": "C", "key": "K"}`` are the same secret.
    """

    if isinstance(secret, str):
        return secret
    if isinstance(secret, BaseModel):
        secret = secret.model_dump(mode="json", exclude_none=True)
    if isinstance(secret, Mapping):
        secret = dict(secret)
    return json.dumps(secret, sort_keys=True, separators=(",", ":"), default=str)


def build_cache_key(provider_kind: Any, token: str, secret: Any) -> str:
    return f"/{provider_kind_name(provider_kind)}/{token}/{canonical_secret(secret)}"


__all__ = ["build_cache_key", "canonical_secret", "provider_kind_name"]
