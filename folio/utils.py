"""Utility functions for Folio.

This module contains small helpers shared by the indexer, resolver and pipeline.

Key functions:
    slugify_term: Normalize a taxonomy value into a term slug.
    page_link: Derive the link of a content file relative to the static root.
    bare_name: Last path segment of a file without its extension.
    is_markdown: Check if a path is a Markdown file.
    is_template: Check if a path is a Jinja template.
    content_type_for: Pick the response content type for a resource.
    is_safe_name: Check that a template name stays inside its directory.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

WHITESPACE_RE = re.compile(r"\s+")

MARKDOWN_SUFFIX = ".md"
TEMPLATE_SUFFIX = ".jinja"

CONTENT_TYPE_TEXT = "text/plain"
CONTENT_TYPE_HTML = "text/html"
CONTENT_TYPE_JSON = "application/json"


def slugify_term(value: str) -> str:
    """Convert a taxonomy value to its term slug.

    Lowercases the value and replaces each run of whitespace with a single dash.

    Args:
        value: Raw taxonomy value from front matter.

    Returns:
        Lowercase dashed slug.

    Examples:
        >>> slugify_term("Getting  Started")
        'getting-started'
    """
    return WHITESPACE_RE.sub("-", value.strip()).lower()


def page_link(rel: Path) -> str:
    """Derive the link for a content file.

    Strips the extension and collapses an ``/index`` suffix to its parent,
    so ``blog/post.md`` and ``blog/post/index.md`` both yield ``/blog/post``.

    Args:
        rel: Path of the file relative to the static root.

    Returns:
        Absolute link path starting with ``/``.
    """
    posix = PurePosixPath(rel.as_posix())
    parts = list(posix.with_suffix("").parts)
    if parts and parts[-1] == "index":
        parts = parts[:-1]
    return "/" + "/".join(parts)


def bare_name(path: Path) -> str:
    """Return the last path segment without extension."""
    return path.stem


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md extension (case-insensitive).
    """
    return path.suffix.lower() == MARKDOWN_SUFFIX


def is_template(path: Path) -> bool:
    """Check if a path is a Jinja template file.

    Args:
        path: Path to check.

    Returns:
        True if the file has the .jinja extension.
    """
    return path.suffix.lower() == TEMPLATE_SUFFIX


def content_type_for(resource_path: Path) -> str:
    """Return the content type used when serving a resource.

    Markdown, HTML and template files are served as HTML, JSON as JSON,
    everything else as plain text.

    Args:
        resource_path: Resolved file path.

    Returns:
        MIME type string.
    """
    suffix = resource_path.suffix.lower()
    if suffix in (MARKDOWN_SUFFIX, ".html", TEMPLATE_SUFFIX):
        return CONTENT_TYPE_HTML
    if suffix == ".json":
        return CONTENT_TYPE_JSON
    return CONTENT_TYPE_TEXT


def is_safe_name(name: str) -> bool:
    """Check that a template or partial name cannot escape its directory.

    Args:
        name: Name as written in front matter or a template.

    Returns:
        False for empty, absolute or parent-relative names.
    """
    if not name or name.startswith(("/", "\\")):
        return False
    return ".." not in PurePosixPath(name.replace("\\", "/")).parts


def last_segment(request_path: str) -> str:
    """Return the last non-empty segment of a URL path.

    Examples:
        >>> last_segment("/blog/tags/python")
        'python'
        >>> last_segment("/")
        ''
    """
    segments = [s for s in request_path.split("/") if s]
    return segments[-1] if segments else ""
