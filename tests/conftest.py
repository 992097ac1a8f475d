from __future__ import annotations

import httpx
import pytest

from tokend.config import TokendSettings
from tokend.providers.context import ProviderContext

from .fakes import FAKE_PROVIDERS, build_context


@pytest.fixture(autouse=True)
def reset_fake_providers() -> None:
    for kind in FAKE_PROVIDERS:
        kind.instances.clear()


@pytest.fixture
def settings() -> TokendSettings:
    return TokendSettings(
        _env_file=None,
        vault={"retry_backoff_seconds": 0.001, "max_retries": 1},
        kms={"region": "us-west-2"},
    )


@pytest.fixture
def offline_context(settings: TokendSettings) -> ProviderContext:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected backend call: {request.method} {request.url}")

    return build_context(handler, settings)
