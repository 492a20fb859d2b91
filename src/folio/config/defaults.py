"""
Default configuration values for Folio.

This module provides default configuration values used when no configuration
file is specified or when values are missing from the configuration.
"""

from typing import Any

# Default configuration dictionary
DEFAULT_CONFIG: dict[str, Any] = {
    # Logging defaults
    "logging": {
        "level": "WARNING",
        "format": "console",
        "output": "stderr",
    },
    # Content check defaults
    "lint": {
        "required_fields": ["layout", "title", "description", "date"],
        "known_fields": [
            "layout",
            "title",
            "description",
            "date",
            "tags",
            "writing_time",
            "republished",
            "permalink",
            "image",
            "comments",
            "published",
        ],
        "warn_unknown_fields": True,
        "allowed_layouts": [],
        "check_code_fences": True,
        "check_links": True,
        "check_filename_date": True,
        "file_patterns": ["*.md", "*.markdown"],
        "strict": False,
    },
    # Post location defaults
    "posts": {
        "directory": "content/_posts",
        "default_layout": "post",
        "extension": ".md",
    },
    # Output defaults
    "output": {
        "format": "console",
        "show_valid": True,
    },
}


def get_default_config_yaml() -> str:
    """
    Generate default configuration as YAML string.

    Returns:
        YAML-formatted default configuration with documentation comments.
    """
    return '''# =============================================================================
# Folio Configuration File
# =============================================================================
# Settings for the folio post tooling. Values can be overridden with
# FOLIO_-prefixed environment variables, e.g. FOLIO_LINT__STRICT=true.
# =============================================================================

# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logging:
  # Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
  level: WARNING

  # Log format: "json" for CI, "console" for terminals
  format: console

  # Output destination: stderr, stdout, or a file path. The CLI flags
  # --verbose, --quiet and --log-level take precedence over this section.
  output: stderr

# -----------------------------------------------------------------------------
# Content Checks
# -----------------------------------------------------------------------------
lint:
  # Front-matter keys every post must define
  required_fields:
    - layout
    - title
    - description
    - date

  # Keys accepted without an "unknown field" warning
  known_fields:
    - layout
    - title
    - description
    - date
    - tags
    - writing_time
    - republished
    - permalink
    - image
    - comments
    - published
  warn_unknown_fields: true

  # Layouts provided by the site theme (empty list accepts any layout)
  allowed_layouts: []

  # Body checks
  check_code_fences: true
  check_links: true

  # Compare the YYYY-MM-DD- filename prefix with the date field
  check_filename_date: true

  # Patterns used when a directory is passed to "folio lint"
  file_patterns:
    - "*.md"
    - "*.markdown"

  # Treat warnings as errors
  strict: false

# -----------------------------------------------------------------------------
# Posts
# -----------------------------------------------------------------------------
posts:
  # Directory holding post files
  directory: content/_posts

  # Layout assigned by "folio post new"
  default_layout: post

  # File extension for new posts
  extension: .md

# -----------------------------------------------------------------------------
# Output
# -----------------------------------------------------------------------------
output:
  # Lint report format: console or json
  format: console

  # List files without issues in console reports
  show_valid: true

# Public site URL used to display post links (optional)
# site_url: https://example.github.io
'''
