"""HTTP reverse proxy that applies the content policy to board posts."""

from .server import create_app

__all__ = ["create_app"]
