"""HTTP transport for the cache backends."""

from .app import create_app

__all__ = ["create_app"]
