"""Host-local secrets agent that leases credentials on behalf of co-located processes."""

__version__ = "0.1.0"

__all__ = ["__version__"]
