"""Per-request rendering for Folio.

The pipeline picks a branch from the resolved file's extension:

- Markdown: split off front matter into ``context.page``, resolve references,
  expand template variables in the body, convert to HTML into
  ``context.content``, then expand the page template (``page.template`` or
  ``default``) against the full context.
- Template (``.jinja``): expand the file against the context.
- Anything else: return the raw bytes.

Key classes:
- RenderPipeline: Renders one resolved file for one request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from jinja2 import TemplateError, TemplateSyntaxError

from .context import ReferenceResolver, RenderContext
from .errors import RenderError
from .frontmatter import TEMPLATE_KEY, FrontMatterParser
from .renderers import html_from_markdown
from .templates import TemplateEngine
from .utils import is_markdown, is_template

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "default"


class RenderPipeline:
    """Renders resolved files into response bodies.

    Attributes:
        engine: Template engine used for macro expansion.
        markdown: Callable converting Markdown text to HTML.
        references: Resolver for related pages.
        parser: Front matter parser.
        default_template: Template used when a page names none.
    """

    def __init__(
        self,
        engine: TemplateEngine,
        markdown: Callable[[str], str] = html_from_markdown,
        references: ReferenceResolver | None = None,
        parser: FrontMatterParser | None = None,
        default_template: str = DEFAULT_TEMPLATE,
    ):
        self.engine = engine
        self.markdown = markdown
        self.references = references or ReferenceResolver()
        self.parser = parser or FrontMatterParser()
        self.default_template = default_template

    def render(self, context: RenderContext, path: Path) -> str | bytes:
        """Render a file for a request.

        Args:
            context: Request context; ``page``, ``content`` and ``references``
                are filled in for Markdown files.
            path: Resolved file path.

        Returns:
            Rendered text for Markdown and template files, raw bytes otherwise.

        Raises:
            RenderError: If the file cannot be read or a template fails.
        """
        try:
            if is_markdown(path):
                return self._render_markdown(context, path)
            if is_template(path):
                return self.engine.expand(self._read_text(path), context.to_template())
            return self._read_bytes(path)
        except RenderError:
            raise
        except TemplateSyntaxError as exc:
            raise RenderError(
                path, f"Template syntax error on line {exc.lineno}: {exc.message}", exc
            ) from exc
        except TemplateError as exc:
            raise RenderError(path, _format_error_message(exc), exc) from exc

    def _render_markdown(self, context: RenderContext, path: Path) -> str:
        body, metadata = self.parser.parse(self._read_text(path))
        context.page = metadata
        self.references.resolve(context)

        expanded = self.engine.expand_raw(body, context.to_template())
        context.content = self.markdown(expanded)

        name = metadata.get(TEMPLATE_KEY) or self.default_template
        logger.debug("Rendering %s with template %s", path, name)
        template = self.engine.load_page_template(name)
        return self.engine.expand(template, context.to_template())

    def _read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RenderError(path, f"Cannot read file: {exc}", exc) from exc

    def _read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise RenderError(path, f"Cannot read file: {exc}", exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format a template exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    if error_type == "UndefinedError":
        return f"Undefined variable: {exc}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {exc}"
    return f"{error_type}: {exc}"
