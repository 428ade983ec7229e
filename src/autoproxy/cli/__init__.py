"""Command-line interface."""

from autoproxy.cli.main import build_parser, main

__all__ = ["build_parser", "main"]
