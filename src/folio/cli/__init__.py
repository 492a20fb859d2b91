"""
Folio Command Line Interface.

This package provides the CLI commands for the Folio post tooling.
"""

from folio.cli.main import app

__all__ = ["app"]
