"""Command-line interface for pairsignal."""

from .server import main

__all__ = ["main"]
