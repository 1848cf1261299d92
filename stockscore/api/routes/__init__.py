"""API route modules."""

from . import health, stocks


__all__ = ["health", "stocks"]
