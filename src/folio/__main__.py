"""
Entry point for running Folio as a module.

Usage:
    python -m folio [COMMAND] [OPTIONS]
"""

from folio.cli.main import app

if __name__ == "__main__":
    app()
