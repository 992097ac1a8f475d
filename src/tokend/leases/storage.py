"""Registry of lease managers and the bounded-wait lookup used by the API."""

from __future__ import annotations

import asyncio
import logging
import math
import weakref
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, TypeVar

from ..exceptions import BootstrapTokenError, FetchError, LookupTimeoutError
from ..providers.context import ProviderContext
from ..providers.token import TokenProvider
from ..utils.timeouts import once_with_timeout
from .keys import build_cache_key
from .manager import LeaseEvent, LeaseManager, LeaseStatus

DEFAULT_TIMEOUT_MILLIS = 500
DEFAULT_TOKEN_SECRET = "default"
MIN_WAIT_MILLIS = 1

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class LeaseLookup:
    """Data resolved for one lookup plus the correlation id of the manager that served it."""

    data: Any
    correlation_id: str


class StorageService:
    """Owns every live :class:`LeaseManager`, keyed by provider kind, token and secret.

    The default bootstrap-token manager is created lazily on first access and
    must be ready before any other secret can be fetched. Lookups wait at most
    ``timeout`` milliseconds for a manager to become ready; a timed-out manager
    is evicted so the next lookup starts over with a fresh provider.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_MILLIS,
        *,
        context: ProviderContext | None = None,
        renew_ceiling: float | None = None,
        token_provider: type = TokenProvider,
    ) -> None:
        self.timeout = timeout
        self.renew_ceiling = renew_ceiling
        self._context = context
        self.token_provider = token_provider
        self._managers: dict[str, LeaseManager] = {}
        self._default_token: LeaseManager | None = None
        self._background: set[asyncio.Task[Any]] = set()
        self._detached: weakref.WeakSet[LeaseManager] = weakref.WeakSet()

    @property
    def context(self) -> ProviderContext:
        if self._context is None:
            self._context = ProviderContext.from_settings()
        return self._context

    @property
    def managers(self) -> Mapping[str, LeaseManager]:
        return self._managers

    @property
    def default_token(self) -> LeaseManager:
        """The bootstrap-token manager, created on first access."""

        key = build_cache_key(self.token_provider, DEFAULT_TOKEN_SECRET, DEFAULT_TOKEN_SECRET)
        if self._default_token is None:
            self._default_token = self._create_manager(
                DEFAULT_TOKEN_SECRET, DEFAULT_TOKEN_SECRET, self.token_provider, key
            )
        return self._default_token

    async def check_default_token(self, timeout: float | None = None) -> str:
        """Make sure the bootstrap token is ready and return it.

        ``timeout`` overrides the service timeout, in milliseconds.
        """

        manager = self.default_token
        if manager.status is not LeaseStatus.READY:
            try:
                await self._bounded(manager.initialize(), self.timeout if timeout is None else timeout)
            except TimeoutError as exc:
                self.log_manager_event(logging.ERROR, "Default token was not ready in time.", manager)
                self.evict(manager)
                raise BootstrapTokenError("timeout: default token was not ready") from exc
            except FetchError as exc:
                raise BootstrapTokenError(str(exc)) from exc

        if manager.status is not LeaseStatus.READY:
            raise BootstrapTokenError("Token manager is not ready.", code="MANAGERNOTREADY")

        data = manager.data
        token = data.get("token") if isinstance(data, Mapping) else None
        if not token:
            raise BootstrapTokenError("No token data.", code="NOTOKENDATA")
        return token

    async def lookup(self, token: str, secret: Any, provider_kind: type) -> LeaseLookup:
        """Return current data for ``secret``, waiting at most ``timeout`` for it.

        Raises :class:`ConfigurationError` when the provider rejects ``secret``,
        :class:`BootstrapTokenError` when the default token is unavailable, and
        :class:`LookupTimeoutError` when the manager does not become ready in time.
        The bootstrap token and the secret share one ``timeout`` budget.
        """

        deadline = self._deadline()
        manager = await self._get_lease_manager(token, secret, provider_kind, deadline)

        if manager.status is not LeaseStatus.READY:
            try:
                await once_with_timeout(manager, LeaseEvent.READY, self._remaining(deadline))
            except LookupTimeoutError as exc:
                self.log_manager_event(logging.ERROR, str(exc), manager)
                self.evict(manager)
                raise

        if not manager.renewable:
            self.evict(manager)

        self.log_manager_event(logging.INFO, "Manager was able to lookup a secret.", manager)
        data = manager.data
        if isinstance(data, Mapping):
            data = dict(data)
        return LeaseLookup(data=data, correlation_id=manager.correlation_id)

    def evict(self, manager: LeaseManager) -> None:
        """Forget ``manager`` if its key still points at it, and stop its renewals.

        An in-flight fetch is left to finish; :meth:`close` still reaches it.
        """

        if manager.name is not None and self._managers.get(manager.name) is manager:
            del self._managers[manager.name]
        if self._default_token is manager:
            self._default_token = None
        manager.detach()
        self._detached.add(manager)

    async def close(self) -> None:
        managers = list(self._managers.values())
        if self._default_token is not None and self._default_token not in managers:
            managers.append(self._default_token)
        managers.extend(manager for manager in self._detached if manager not in managers)
        for manager in managers:
            await manager.close()

        for task in list(self._background):
            task.cancel()
        await asyncio.gather(*self._background, return_exceptions=True)

        self._managers.clear()
        self._detached.clear()
        self._default_token = None
        if self._context is not None:
            await self._context.close()

    async def _get_lease_manager(
        self, token: str, secret: Any, provider_kind: type, deadline: float | None = None
    ) -> LeaseManager:
        key = build_cache_key(provider_kind, token, secret)
        bootstrap_token = await self.check_default_token(self._remaining(deadline))

        manager = self._managers.get(key)
        if manager is not None:
            self.log_manager_event(logging.DEBUG, "Retrieved LeaseManager.", manager)
        else:
            manager = self._create_manager(bootstrap_token, secret, provider_kind, key)

        if manager.status is not LeaseStatus.READY:
            self._kick(manager)
        return manager

    def _create_manager(self, token: str, secret: Any, provider_kind: type, key: str) -> LeaseManager:
        provider = provider_kind(secret, token, self.context)
        ceiling = self.renew_ceiling if provider_kind is self.token_provider else None
        manager = LeaseManager(provider, key, renew_ceiling=ceiling)

        self.set_events(manager)
        self.log_manager_event(logging.INFO, "Created LeaseManager.", manager)

        # Non-renewable providers are rebuilt on every lookup.
        if manager.renewable:
            self._managers[key] = manager
        return manager

    def _kick(self, manager: LeaseManager) -> None:
        task = asyncio.create_task(manager.initialize())
        self._background.add(task)
        task.add_done_callback(self._background_done)

    def _background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if not task.cancelled():
            # Failures are recorded on the manager and logged by its observers.
            task.exception()

    def _deadline(self) -> float | None:
        """Loop time at which the current lookup runs out, or ``None`` when unbounded."""

        if self.timeout is None or not math.isfinite(self.timeout) or self.timeout <= 0:
            return None
        return asyncio.get_running_loop().time() + self.timeout / 1000

    @staticmethod
    def _remaining(deadline: float | None) -> float | None:
        if deadline is None:
            return None
        remaining = (deadline - asyncio.get_running_loop().time()) * 1000
        # Zero would mean "wait forever" downstream.
        return max(remaining, MIN_WAIT_MILLIS)

    @staticmethod
    async def _bounded(awaitable: Awaitable[T], timeout: float | None) -> T:
        if timeout is not None and math.isfinite(timeout) and timeout > 0:
            return await asyncio.wait_for(awaitable, timeout / 1000)
        return await awaitable

    @staticmethod
    def log_manager_event(level: int, message: Any, manager: LeaseManager) -> None:
        logger.log(
            level,
            "%s",
            message,
            extra={
                "provider": manager.provider_name,
                "status": manager.status.value,
                "lease_duration": manager.lease_duration,
                "correlation_id": manager.correlation_id,
            },
        )

    @classmethod
    def set_events(cls, manager: LeaseManager) -> None:
        manager.on(
            LeaseEvent.READY,
            lambda: cls.log_manager_event(logging.INFO, "Manager is ready.", manager),
        )
        manager.on(
            LeaseEvent.RENEWED,
            lambda: cls.log_manager_event(logging.INFO, "Manager renewed provider's data.", manager),
        )
        manager.on(
            LeaseEvent.ERROR,
            lambda error: cls.log_manager_event(logging.ERROR, error, manager),
        )
        manager.on(
            LeaseEvent.INVALIDATE,
            lambda: cls.log_manager_event(
                logging.INFO, "Invalidating manager due to expiration.", manager
            ),
        )


__all__ = ["DEFAULT_TIMEOUT_MILLIS", "DEFAULT_TOKEN_SECRET", "LeaseLookup", "StorageService"]
