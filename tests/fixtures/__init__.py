"""Test fixtures for Folio tests."""

from tests.fixtures.posts import (
    get_crlf_post,
    get_minimal_post,
    get_post_bad_date,
    get_post_empty_link,
    get_post_missing_title,
    get_post_unclosed_fence,
    get_post_unresolved_reference,
    get_quirky_post,
    get_valid_post,
    make_post,
    write_post,
)

__all__ = [
    # Well-formed posts
    "get_valid_post",
    "get_quirky_post",
    "get_minimal_post",
    "get_crlf_post",
    # Broken posts
    "get_post_missing_title",
    "get_post_bad_date",
    "get_post_unclosed_fence",
    "get_post_empty_link",
    "get_post_unresolved_reference",
    # Utility functions
    "make_post",
    "write_post",
]
