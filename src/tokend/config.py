"""Process configuration for tokend."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.time_parser import parse_duration


class ServiceSettings(BaseModel):
    """Where the local API listens and how long lookups may wait."""

    host: str = Field(default="127.0.0.1", description="Interface the API binds to")
    port: int = Field(default=4500, ge=1, le=65535, description="Port the API binds to")
    storage_timeout_ms: float = Field(
        default=500,
        gt=0,
        description="Maximum time (milliseconds) a lookup waits for a secret to become ready",
    )


class VaultSettings(BaseModel):
    """Connection details for the remote secret store."""

    host: str = "127.0.0.1"
    port: int = Field(default=8200, ge=1, le=65535)
    tls: bool = True
    token_renew_increment: float = Field(
        default=3600.0,
        ge=0,
        description="Renewal increment for the bootstrap token; also caps its renewal interval",
    )
    timeout: float = Field(default=10.0, gt=0, description="HTTP timeout (seconds)")
    max_retries: int = Field(default=3, ge=0, description="Retries for transient HTTP errors")
    retry_backoff_seconds: float = Field(
        default=0.5,
        gt=0,
        description="Base delay (seconds) for exponential backoff between retries",
    )
    verify_ssl: bool = True

    @field_validator("token_renew_increment", mode="before")
    @classmethod
    def _parse_increment(cls, value: Any) -> float:
        return parse_duration(value)

    @property
    def address(self) -> str:
        scheme = "https" if self.tls else "http"
        return f"{scheme}://{self.host}:{self.port}"


class WardenSettings(BaseModel):
    """Location of the identity service that trades attestation documents for tokens."""

    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    path: str = "/v1/authenticate"
    tls: bool = False
    timeout: float = Field(default=10.0, gt=0)

    @property
    def address(self) -> str:
        scheme = "https" if self.tls else "http"
        return f"{scheme}://{self.host}:{self.port}"


class MetadataSettings(BaseModel):
    """EC2 instance metadata endpoint."""

    host: str = "http://169.254.169.254"
    timeout: float = Field(default=2.0, gt=0)


class KMSSettings(BaseModel):
    region: str | None = Field(
        default=None,
        description="AWS region for KMS; resolved from instance metadata when unset",
    )


class LogSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = Field(default=False, description="Emit one JSON object per log line")
    requests: bool = Field(default=False, description="Log every HTTP request")


class TokendSettings(BaseSettings):
    """Settings for the agent, read from ``TOKEND_*`` environment variables."""

    service: ServiceSettings = Field(default_factory=ServiceSettings)
    vault: VaultSettings = Field(default_factory=VaultSettings)
    warden: WardenSettings = Field(default_factory=WardenSettings)
    metadata: MetadataSettings = Field(default_factory=MetadataSettings)
    kms: KMSSettings = Field(default_factory=KMSSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        env_prefix="TOKEND_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )


__all__ = [
    "KMSSettings",
    "LogSettings",
    "MetadataSettings",
    "ServiceSettings",
    "TokendSettings",
    "VaultSettings",
    "WardenSettings",
]
