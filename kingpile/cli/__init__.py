"""Command-line interface for King Pile."""

from .main import app, main

__all__ = ["app", "main"]
