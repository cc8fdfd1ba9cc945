"""Command line interface for the bulk action updater."""

from .app import main

__all__ = ["main"]
