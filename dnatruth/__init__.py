"""Truth artifact services, data types, configuration and helpers for semantic search."""

__version__ = "0.2.1"
__all__ = ["types", "config", "search", "artifacts", "fixtures"]