"""Envelope decryption through AWS KMS."""

from __future__ import annotations

import asyncio
import base64
import binascii
from collections.abc import Mapping
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import ConfigurationError, FetchError
from .base import LeaseResult
from .context import ProviderContext

DEFAULT_REGION = "us-east-1"


class KMSProvider:
    """Decrypts a base64 ``ciphertext`` blob; non-renewable."""

    def __init__(
        self, secret: Any, token: str | None = None, context: ProviderContext | None = None
    ) -> None:
        if not isinstance(secret, Mapping) or not secret:
            raise ConfigurationError("secret is required")
        if not secret.get("ciphertext"):
            raise ConfigurationError("secret.ciphertext is required")

        try:
            self._ciphertext_blob = base64.b64decode(str(secret["ciphertext"]), validate=True)
        except binascii.Error as exc:
            raise ConfigurationError("secret.ciphertext must be base64 encoded") from exc

        self._context = context or ProviderContext.from_settings()
        self.region: str = (
            secret.get("region") or self._context.settings.kms.region or DEFAULT_REGION
        )
        self._client: Any = None

    async def initialize(self) -> LeaseResult:
        return await self._decrypt()

    def invalidate(self) -> None:
        """Nothing is cached locally."""

    async def _decrypt(self) -> LeaseResult:
        try:
            response = await asyncio.to_thread(self._decrypt_blob)
        except ClientError as exc:
            error = exc.response.get("Error", {})
            raise FetchError(
                f"{error.get('Code', 'ClientError')}: {error.get('Message', str(exc))}"
            ) from exc
        except BotoCoreError as exc:
            raise FetchError(str(exc)) from exc

        return LeaseResult(
            data={
                "KeyId": response.get("KeyId"),
                "Plaintext": base64.b64encode(response["Plaintext"]).decode("ascii"),
            },
            renewable=False,
        )

    def _decrypt_blob(self) -> dict[str, Any]:
        # Runs in a worker thread; client construction reads config files.
        if self._client is None:
            self._client = boto3.client("kms", region_name=self.region)
        return self._client.decrypt(CiphertextBlob=self._ciphertext_blob)


__all__ = ["DEFAULT_REGION", "KMSProvider"]
