"""Command-line interface for path-acl."""

from path_acl.cli.main import cli, main

__all__ = ["cli", "main"]
