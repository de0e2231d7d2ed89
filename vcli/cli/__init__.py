"""Command line interface for vcli."""

from .main import cli, main

__all__ = ["cli", "main"]
