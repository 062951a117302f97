"""The ``instructkit`` command-line interface."""

from instructkit_cli.cli import build_parser, main

__all__ = ["build_parser", "main"]
