"""Lifecycle of one leased secret: fetch, renew on a timer, invalidate."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from enum import StrEnum
from typing import Any, Callable

from ..exceptions import FetchError
from ..providers.base import LeaseResult, Provider, ProviderOutput, is_renewable
from ..utils.correlation import create_correlation_id
from .policy import (
    DEFAULT_MIN_RENEW_INTERVAL,
    ExpirationPolicy,
    expires_before_next_renewal,
    renewal_interval,
)

Listener = Callable[..., object]


class LeaseStatus(StrEnum):
    PENDING = "PENDING"
    READY = "READY"
    ERROR = "ERROR"


class LeaseEvent(StrEnum):
    READY = "ready"
    RENEWED = "renewed"
    ERROR = "error"
    INVALIDATE = "invalidate"


class LeaseManager:
    """Drives a provider and exposes the secret's current status and data.

    At most one provider call (initialize or renew) is in flight at a time.
    Concurrent ``initialize()`` calls share that call and its outcome.
    Listeners registered with :meth:`on` run synchronously after each
    transition has been fully applied.
    """

    def __init__(
        self,
        provider: Provider,
        name: str | None = None,
        *,
        renew_ceiling: float | None = None,
        min_renew_interval: float = DEFAULT_MIN_RENEW_INTERVAL,
        expiration_policy: ExpirationPolicy = expires_before_next_renewal,
    ) -> None:
        self.provider = provider
        self.name = name
        self.status: LeaseStatus = LeaseStatus.PENDING
        self.data: Any = None
        self.lease_duration: float = 0
        self.error: Exception | None = None
        self.correlation_id: str = create_correlation_id()
        self.detached = False

        self._renew_ceiling = renew_ceiling
        self._min_renew_interval = min_renew_interval
        self._expiration_policy = expiration_policy
        self._declared_renewable: bool | None = None
        self._max_ttl: float | None = None
        self._issued_at: float | None = None

        self._listeners: defaultdict[LeaseEvent, list[Listener]] = defaultdict(list)
        self._operation: asyncio.Task[Any] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._timeout: float | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def renewable(self) -> bool:
        if not is_renewable(self.provider):
            return False
        return self._declared_renewable is not False

    @property
    def provider_name(self) -> str:
        return type(self.provider).__name__

    @property
    def renew_interval(self) -> float | None:
        """Seconds until the armed renewal fires, or ``None`` when no timer is armed."""

        return self._timeout

    def on(self, event: LeaseEvent, listener: Listener) -> None:
        self._listeners[LeaseEvent(event)].append(listener)

    def off(self, event: LeaseEvent, listener: Listener) -> None:
        listeners = self._listeners[LeaseEvent(event)]
        if listener in listeners:
            listeners.remove(listener)

    async def initialize(self) -> Any:
        """Fetch the secret unless it is already ready; return the current data.

        A failure moves the manager to ERROR and is raised to every caller
        awaiting this fetch. The manager never retries by itself.
        """

        if self.status is LeaseStatus.READY:
            return self.data
        if not self._busy:
            self._operation = asyncio.create_task(self._fetch())
        return await asyncio.shield(self._operation)

    async def renew(self) -> Any:
        """Renew now. Failures are recorded on the manager, never raised."""

        if not self.renewable or self.status is not LeaseStatus.READY:
            return self.data
        if not self._busy:
            self._operation = asyncio.create_task(self._refresh())
        await asyncio.shield(self._operation)
        return self.data

    def invalidate(self) -> None:
        """Drop everything so the next ``initialize()`` re-issues the grant."""

        self._clear_timer()
        self.status = LeaseStatus.PENDING
        self.data = None
        self.lease_duration = 0
        self.error = None
        self._declared_renewable = None
        self._max_ttl = None
        self._issued_at = None

        invalidate = getattr(self.provider, "invalidate", None)
        if callable(invalidate):
            invalidate()
        self._emit(LeaseEvent.INVALIDATE)

    def detach(self) -> None:
        """Stop renewing without abandoning an in-flight call.

        A detached manager may still finish its current fetch, but it never
        arms another renewal timer.
        """

        self.detached = True
        self._clear_timer()

    async def close(self) -> None:
        """Stop the renewal timer and abandon any in-flight provider call."""

        self._clear_timer()
        operation = self._operation
        if operation is not None and not operation.done():
            operation.cancel()
            await asyncio.gather(operation, return_exceptions=True)

    @property
    def _busy(self) -> bool:
        return self._operation is not None and not self._operation.done()

    async def _fetch(self) -> Any:
        try:
            result = _coerce(await self.provider.initialize())
            if result.data is None:
                raise FetchError(f"{self.provider_name} returned no data")
        except FetchError as exc:
            self._fail(exc, keep_data=False)
            raise
        except Exception as exc:
            error = FetchError(f"{self.provider_name} failed to initialize: {exc}")
            self._fail(error, keep_data=False)
            raise error from exc

        was_ready = self.status is LeaseStatus.READY
        self._apply(result)
        self._issued_at = asyncio.get_running_loop().time()
        self.error = None
        self.status = LeaseStatus.READY
        self._clear_timer()
        self._schedule_renewal()
        if not was_ready:
            self._emit(LeaseEvent.READY)
        return self.data

    async def _refresh(self) -> None:
        try:
            result = _coerce(await self.provider.renew())  # type: ignore[attr-defined]
        except Exception as exc:
            error = exc if isinstance(exc, FetchError) else FetchError(
                f"{self.provider_name} failed to renew: {exc}"
            )
            if error is not exc:
                error.__cause__ = exc
            if self.status is LeaseStatus.READY:
                self._fail(error, keep_data=True)
            return

        # Invalidated while the renewal was in flight.
        if self.status is not LeaseStatus.READY:
            return

        self._apply(result)
        self.error = None
        self.status = LeaseStatus.READY

        expiring = self._near_expiration()
        if not expiring:
            self._clear_timer()
            self._schedule_renewal()
        self._emit(LeaseEvent.RENEWED)
        if expiring:
            self.invalidate()

    def _apply(self, result: LeaseResult) -> None:
        if result.data is not None:
            self.data = result.data
        self.lease_duration = result.lease_duration
        if result.renewable is not None:
            self._declared_renewable = result.renewable
        if result.max_ttl is not None:
            self._max_ttl = result.max_ttl

    def _fail(self, error: FetchError, *, keep_data: bool) -> None:
        self._clear_timer()
        if not keep_data:
            self.data = None
            self.lease_duration = 0
        self.error = error
        self.status = LeaseStatus.ERROR
        self._emit(LeaseEvent.ERROR, error)

    def _near_expiration(self) -> bool:
        if self._issued_at is None:
            return False
        elapsed = asyncio.get_running_loop().time() - self._issued_at
        return self._expiration_policy(elapsed, self.lease_duration, self._max_ttl)

    def _schedule_renewal(self) -> None:
        if self._timer is not None or self.detached:
            return
        if not self.renewable or self.status is not LeaseStatus.READY:
            return
        # A zero lease never expires.
        if self.lease_duration <= 0:
            return

        self._timeout = renewal_interval(
            self.lease_duration,
            minimum=self._min_renew_interval,
            maximum=self._renew_ceiling,
        )
        self._timer = asyncio.get_running_loop().call_later(self._timeout, self._on_timer)

    def _clear_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._timeout = None

    def _on_timer(self) -> None:
        self._timer = None
        if self._busy or self.status is not LeaseStatus.READY:
            return
        self._operation = asyncio.create_task(self._refresh())

    def _emit(self, event: LeaseEvent, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(*args)
            except Exception:
                self._logger.exception(
                    "Lease manager listener failed",
                    extra={"event": event.value, "correlation_id": self.correlation_id},
                )


def _coerce(result: ProviderOutput) -> LeaseResult:
    if isinstance(result, LeaseResult):
        return result
    return LeaseResult.model_validate(result)


__all__ = ["LeaseEvent", "LeaseManager", "LeaseStatus", "Listener"]
