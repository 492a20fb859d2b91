"""
Folio

Tooling for a Markdown blog post repository: front-matter parsing and
serialization, content linting, and post lifecycle commands for a
static-site generator.
"""

from folio.version import __version__

__all__ = ["__version__"]
