"""Main CLI module for logscope.

This module re-exports the CLI for convenience. The main implementation
is in __main__.py.
"""

from logscope.__main__ import cli

__all__ = ["cli"]
