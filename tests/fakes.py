"""Fake providers and backend wiring shared by the test modules."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, ClassVar

import httpx

from tokend.config import TokendSettings
from tokend.providers.context import ProviderContext
from tokend.providers.identity import InstanceMetadata, WardenClient
from tokend.providers.vault import VaultClient


class CountingProvider:
    """Base for fake providers: records every instance and every call."""

    instances: ClassVar[list[Any]] = []
    result: ClassVar[dict[str, Any]] = {"data": {"value": "SECRET"}, "lease_duration": 60}

    def __init__(self, secret: Any = None, token: str | None = None, context: Any = None) -> None:
        type(self).instances.append(self)
        self.secret = secret
        self.token = token
        self.context = context
        self.initialize_calls = 0
        self.invalidated = False

    async def initialize(self) -> Any:
        self.initialize_calls += 1
        return dict(self.result)

    def invalidate(self) -> None:
        self.invalidated = True


class FakeTokenProvider(CountingProvider):
    instances: ClassVar[list[Any]] = []
    result: ClassVar[dict[str, Any]] = {"data": {"token": "T"}, "lease_duration": 60}

    async def renew(self) -> Any:
        return dict(self.result)


class FailingTokenProvider(FakeTokenProvider):
    instances: ClassVar[list[Any]] = []

    async def initialize(self) -> Any:
        self.initialize_calls += 1
        raise RuntimeError("warden unavailable")


class EmptyTokenProvider(FakeTokenProvider):
    instances: ClassVar[list[Any]] = []
    result: ClassVar[dict[str, Any]] = {"data": {"other": "x"}, "lease_duration": 60}


class StalledTokenProvider(FakeTokenProvider):
    instances: ClassVar[list[Any]] = []

    async def initialize(self) -> Any:
        self.initialize_calls += 1
        await asyncio.Event().wait()


class SlowTokenProvider(FakeTokenProvider):
    """Issues the token after a short delay."""

    instances: ClassVar[list[Any]] = []
    delay: ClassVar[float] = 0.045

    async def initialize(self) -> Any:
        await asyncio.sleep(self.delay)
        return await super().initialize()


class ImmediateProvider(CountingProvider):
    """Single-shot provider without a renew capability."""

    instances: ClassVar[list[Any]] = []
    result: ClassVar[dict[str, Any]] = {"data": {"value": "SECRET"}}


class RenewableProvider(CountingProvider):
    instances: ClassVar[list[Any]] = []

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.renew_calls = 0

    async def renew(self) -> Any:
        self.renew_calls += 1
        return dict(self.result)


class DeclaredNonRenewableProvider(RenewableProvider):
    instances: ClassVar[list[Any]] = []
    result: ClassVar[dict[str, Any]] = {"data": {"value": "ONCE"}, "renewable": False}


class GatedProvider(RenewableProvider):
    """Initialize blocks until the test opens ``gate``."""

    instances: ClassVar[list[Any]] = []

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.gate = asyncio.Event()

    async def initialize(self) -> Any:
        self.initialize_calls += 1
        await self.gate.wait()
        return dict(self.result)


class NeverProvider(RenewableProvider):
    instances: ClassVar[list[Any]] = []

    async def initialize(self) -> Any:
        self.initialize_calls += 1
        await asyncio.Event().wait()


class FailingProvider(RenewableProvider):
    instances: ClassVar[list[Any]] = []

    async def initialize(self) -> Any:
        self.initialize_calls += 1
        raise RuntimeError("backend exploded")


FAKE_PROVIDERS = (
    FakeTokenProvider,
    FailingTokenProvider,
    EmptyTokenProvider,
    StalledTokenProvider,
    SlowTokenProvider,
    ImmediateProvider,
    RenewableProvider,
    DeclaredNonRenewableProvider,
    GatedProvider,
    NeverProvider,
    FailingProvider,
)


Handler = Callable[[httpx.Request], httpx.Response]


def build_context(handler: Handler, settings: TokendSettings) -> ProviderContext:
    """A provider context whose backend clients all talk to ``handler``."""

    transport = httpx.MockTransport(handler)
    return ProviderContext(
        settings=settings,
        vault=VaultClient(
            settings.vault,
            client=httpx.AsyncClient(transport=transport, base_url=settings.vault.address),
        ),
        metadata=InstanceMetadata(
            settings.metadata,
            client=httpx.AsyncClient(transport=transport, base_url=settings.metadata.host),
        ),
        warden=WardenClient(
            settings.warden,
            client=httpx.AsyncClient(transport=transport, base_url=settings.warden.address),
        ),
    )


class Backend:
    """Mock HTTP backend routing on ``(method, path)`` and recording every request."""

    def __init__(self, routes: dict[tuple[str, str], Any]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text="no route")
        if callable(route):
            return route(request)
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if (r.method, r.url.path) == (method, path)]
