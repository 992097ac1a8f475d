"""Bounded waiting on manager notifications."""

from __future__ import annotations

import asyncio
import math
from typing import Any, Callable, Protocol

from ..exceptions import LookupTimeoutError


class EventSource(Protocol):
    """Anything that lets callers subscribe to named notifications."""

    def on(self, event: Any, listener: Callable[..., object]) -> None: ...

    def off(self, event: Any, listener: Callable[..., object]) -> None: ...


async def once_with_timeout(
    emitter: EventSource, event: Any, timeout: float | None
) -> tuple[Any, ...]:
    """Wait for ``emitter`` to fire ``event`` once and return its arguments.

    ``timeout`` is in milliseconds. Only a positive, finite value bounds the
    wait; anything else waits indefinitely. On expiry the listener is removed
    and :class:`LookupTimeoutError` is raised.
    """

    if emitter is None:
        raise ValueError("emitter is required")
    if not event:
        raise ValueError("event is required")

    future: asyncio.Future[tuple[Any, ...]] = asyncio.get_running_loop().create_future()

    def handler(*args: Any) -> None:
        if not future.done():
            future.set_result(args)

    emitter.on(event, handler)
    try:
        if timeout is None or not math.isfinite(timeout) or timeout <= 0:
            return await future
        try:
            return await asyncio.wait_for(future, timeout / 1000)
        except TimeoutError as exc:
            name = getattr(event, "value", event)
            raise LookupTimeoutError(f"timeout: '{name}' event") from exc
    finally:
        emitter.off(event, handler)


__all__ = ["EventSource", "once_with_timeout"]
