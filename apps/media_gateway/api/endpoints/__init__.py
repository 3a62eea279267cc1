"""Media gateway endpoint modules."""

from . import health, proxy, upload  # noqa: F401

__all__ = ["health", "proxy", "upload"]
