"""Internet Computer transport types, request IDs and representation-independent hashing."""

__version__ = "0.1.0"

__all__ = ["errors", "hashing", "request_id", "expiry", "types", "signed"]