"""
Folio Configuration Management.

This package provides configuration loading, validation, and management
for the Folio post tooling.
"""

from folio.config.manager import ConfigManager
from folio.config.models import FolioConfig

__all__ = ["ConfigManager", "FolioConfig"]
