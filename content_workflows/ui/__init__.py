"""Console rendering for the command line interface."""

from .console import ConsoleManager

__all__ = ["ConsoleManager"]
