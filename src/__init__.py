"""servicecache — memoize service operations with per-service invalidation."""

__version__ = "0.1.0"
