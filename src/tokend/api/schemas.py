"""Request bodies accepted by the decrypt routes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TransitDecryptRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    key: str = Field(min_length=1, description="Transit key name")
    ciphertext: str = Field(min_length=1, description="Vault transit ciphertext")


class KMSDecryptRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ciphertext: str = Field(min_length=1, description="Base64 encoded KMS ciphertext blob")
    region: str | None = Field(default=None, description="AWS region; defaults to the instance's")


__all__ = ["KMSDecryptRequest", "TransitDecryptRequest"]
