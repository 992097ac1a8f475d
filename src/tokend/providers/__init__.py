"""Secret-store adapters consumed by the lease managers."""

from .base import LeaseResult, Provider, ProviderOutput, is_renewable
from .context import ProviderContext
from .generic import CubbyholeProvider, GenericProvider, SecretProvider
from .identity import InstanceMetadata, WardenClient
from .kms import KMSProvider
from .token import TokenProvider
from .transit import TransitProvider
from .vault import VaultClient

__all__ = [
    "CubbyholeProvider",
    "GenericProvider",
    "InstanceMetadata",
    "KMSProvider",
    "LeaseResult",
    "Provider",
    "ProviderContext",
    "ProviderOutput",
    "SecretProvider",
    "TokenProvider",
    "TransitProvider",
    "VaultClient",
    "WardenClient",
    "is_renewable",
]
