"""Request handling for Folio.

A Site ties the pieces together for one project directory. It builds the
SiteIndex once, then turns ``(method, request_path)`` pairs into responses:

    resolve -> build context -> render

Unresolved paths fall back to the ``/404`` resource, and to a fixed plain-text
body when that is missing too. Render failures become a 500 response for that
request only.

Key classes:
- Response: Status line, content type and body of one response.
- Site: Holds config and index, and handles requests.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import DEFAULT_CONFIG, load_config, read_list
from .context import ContextBuilder
from .errors import RenderError
from .pipeline import RenderPipeline
from .resolver import ResourceResolver
from .taxonomy import SiteIndex, TaxonomyIndexer
from .templates import TemplateEngine, TemplateLoader
from .utils import CONTENT_TYPE_TEXT, content_type_for

logger = logging.getLogger(__name__)

HTTP_STATUS_200 = "200 OK"
HTTP_STATUS_404 = "404 Not Found"
HTTP_STATUS_500 = "500 Internal Server Error"

NOT_FOUND_PATH = "/404"
NOT_FOUND_BODY = "File not found."
SERVER_ERROR_BODY = "Internal Server Error."


@dataclass(frozen=True)
class Response:
    """A rendered response.

    Attributes:
        status: Status line text, e.g. ``200 OK``.
        content_type: Value of the Content-Type header.
        body: Encoded response body.
    """

    status: str
    content_type: str
    body: bytes

    @property
    def status_code(self) -> int:
        return int(self.status.split(" ", 1)[0])

    @property
    def reason(self) -> str:
        return self.status.split(" ", 1)[1] if " " in self.status else ""


def _encode(body: str | bytes) -> bytes:
    return body if isinstance(body, bytes) else body.encode("utf-8")


class Site:
    """A content project served from disk.

    Attributes:
        project_root: Directory holding the config, ``static`` and ``templates``.
        config: Configuration mapping.
        static_dir: Content root.
        templates_dir: Template root.
        index: Current SiteIndex, empty until build_index() runs.
    """

    def __init__(self, project_root: Path, config: dict[str, Any] | None = None):
        self.project_root = project_root
        self.config = dict(DEFAULT_CONFIG) if config is None else config
        self.static_dir = project_root / str(self.config.get("static_dir", "static"))
        self.templates_dir = project_root / str(
            self.config.get("templates_dir", "templates")
        )
        self.index = SiteIndex()
        self.resolver = ResourceResolver(self.static_dir)
        self.contexts = ContextBuilder()
        self.engine = TemplateEngine(TemplateLoader(self.templates_dir))
        self.pipeline = RenderPipeline(
            self.engine,
            default_template=str(self.config.get("default_template") or "default"),
        )

    @classmethod
    def from_project(cls, project_root: Path) -> Site:
        """Create a Site with the config found in ``project_root``."""
        return cls(project_root, load_config(project_root))

    def build_index(self) -> SiteIndex:
        """Build the site index and install it.

        The new index is fully built before it replaces the current one in a
        single assignment, so requests already holding the old index keep using
        it unchanged.

        Returns:
            The new index.
        """
        multi_valued = read_list(self.config, "multi_valued", ["tags"])
        index = TaxonomyIndexer(self.static_dir, multi_valued).build()
        self.index = index
        return index

    reload_index = build_index

    def _display_path(self, path: Path) -> str:
        try:
            return Path(os.path.relpath(path, self.project_root)).as_posix()
        except ValueError:
            return path.as_posix()

    def _render(
        self, method: str, request_path: str, path: Path, status: str, index: SiteIndex
    ) -> Response:
        context = self.contexts.build(
            method, request_path, Path(self._display_path(path)), self.config, index
        )
        try:
            body = self.pipeline.render(context, path)
        except RenderError as exc:
            logger.error("Render failed for %s: %s", request_path, exc.message)
            return Response(HTTP_STATUS_500, CONTENT_TYPE_TEXT, SERVER_ERROR_BODY.encode())
        except Exception:
            logger.exception("Unexpected error rendering %s", request_path)
            return Response(HTTP_STATUS_500, CONTENT_TYPE_TEXT, SERVER_ERROR_BODY.encode())
        return Response(status, content_type_for(path), _encode(body))

    def handle(self, method: str, request_path: str) -> Response:
        """Handle one request.

        Args:
            method: HTTP method.
            request_path: URL path without query string.

        Returns:
            The response to send.
        """
        index = self.index
        path = self.resolver.resolve(request_path)
        if path is not None:
            response = self._render(method, request_path, path, HTTP_STATUS_200, index)
        else:
            missing = self.resolver.resolve(NOT_FOUND_PATH)
            if missing is not None:
                response = self._render(
                    method, request_path, missing, HTTP_STATUS_404, index
                )
            else:
                response = Response(
                    HTTP_STATUS_404, CONTENT_TYPE_TEXT, NOT_FOUND_BODY.encode()
                )
        logger.info("%s %s -> %s", method, request_path, response.status)
        return response
