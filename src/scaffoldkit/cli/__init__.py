"""Command line interface for scaffoldkit."""

from scaffoldkit.cli.app import app

__all__ = ["app"]
