"""Command-line interface for sqlshelf."""

from .main import create_parser, main

__all__ = ["create_parser", "main"]
