"""Command line interface for forklift."""

from .__main__ import main

__all__ = ["main"]
