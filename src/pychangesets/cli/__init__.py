"""Command line interface."""

from pychangesets.cli.app import app, main

__all__ = ["app", "main"]
