"""Renewal scheduling policies."""

from __future__ import annotations

from typing import Callable, Final, TypeAlias

DEFAULT_MIN_RENEW_INTERVAL: Final[float] = 0.5

# (elapsed seconds since issue, current lease duration, hard ceiling) -> must re-issue
ExpirationPolicy: TypeAlias = Callable[[float, float, float | None], bool]


def renewal_interval(
    lease_duration: float,
    *,
    minimum: float = DEFAULT_MIN_RENEW_INTERVAL,
    maximum: float | None = None,
) -> float:
    """Return the delay (seconds) before the next renewal: half the lease.

    ``minimum`` keeps short leases from spinning; ``maximum`` caps the wait so
    a renewal always lands before the remote side's own expiration policy.
    """

    interval = max(lease_duration / 2, minimum)
    if maximum is not None and maximum > 0:
        interval = min(interval, maximum)
    return interval


def expires_before_next_renewal(
    elapsed: float, lease_duration: float, ceiling: float | None
) -> bool:
    """True when the next renewal would land at or past the ceiling."""

    if not ceiling:
        return False
    return elapsed + lease_duration / 2 >= ceiling


def lease_truncated(elapsed: float, lease_duration: float, ceiling: float | None) -> bool:
    """True when the backend granted less than the full ceiling.

    Use with a renewal increment as the ceiling: a short grant means the
    backend is clamping to its maximum TTL and renewing further is pointless.
    """

    if not ceiling:
        return False
    return lease_duration < ceiling


__all__ = [
    "DEFAULT_MIN_RENEW_INTERVAL",
    "ExpirationPolicy",
    "expires_before_next_renewal",
    "lease_truncated",
    "renewal_interval",
]
