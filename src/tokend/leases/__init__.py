"""Lease lifecycle and lookup coordination."""

from .keys import build_cache_key, canonical_secret
from .manager import LeaseEvent, LeaseManager, LeaseStatus
from .policy import expires_before_next_renewal, lease_truncated, renewal_interval
from .storage import LeaseLookup, StorageService

__all__ = [
    "LeaseEvent",
    "LeaseLookup",
    "LeaseManager",
    "LeaseStatus",
    "StorageService",
    "build_cache_key",
    "canonical_secret",
    "expires_before_next_renewal",
    "lease_truncated",
    "renewal_interval",
]
