"""Command line interface for the user store."""

from .main import app

__all__ = ["app"]
