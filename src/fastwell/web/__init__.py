"""Web interface for fastwell."""

from .app import create_app

__all__ = ["create_app"]
