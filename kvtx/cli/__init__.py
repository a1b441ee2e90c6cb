"""
Command-line interface for kvtx.

Provides the interactive shell that feeds stdin lines to a Session.
"""

from .shell import build_parser, main, run_shell

__all__ = ["build_parser", "main", "run_shell"]
