"""Command-line interface for mutepuck."""

from .main import cli

__all__ = ["cli"]
