"""Folio content server.

This package renders a tree of Markdown and Jinja files into HTML pages on request.
Front matter from every Markdown page feeds a site-wide taxonomy index
(categories, tags, series, or any other key) that templates can query for navigation.

The main entry point is the CLI module, which provides commands for serving a site,
dumping its index, and rendering a single request path.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
