"""Exceptions raised by Folio."""

from __future__ import annotations

from pathlib import Path


class FolioError(Exception):
    """Base class for Folio errors."""


class ConfigError(FolioError):
    """The config document could not be parsed."""


class RenderError(FolioError):
    """Error while rendering a resource, with file context.

    Attributes:
        source_path: Path to the file that failed to render.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")
