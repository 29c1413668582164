"""FastAPI surface of audioshelf."""

from .application import create_app

__all__ = ["create_app"]
