"""
CLI module for chartvalues.

Provides the command-line interface using Click.
"""

from chartvalues.cli.main import cli, main

__all__ = ["main", "cli"]
