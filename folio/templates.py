"""Template loading and expansion for Folio.

This module uses Jinja2 as the macro-expansion engine. Page templates live at
``templates/<name>.jinja`` and partials at ``templates/partials/<name>.jinja``.

Key classes:
- TemplateLoader: Resolves template and partial names to source text. It is also
  the Jinja loader, so ``{% include "partials/nav" %}`` works in templates.
- TemplateEngine: Expands template text against a render context.

Partials can be pulled in with ``{{ partial("nav") }}``. A missing partial
expands to an empty string instead of failing the surrounding template.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from jinja2 import (
    BaseLoader,
    Environment,
    TemplateNotFound,
    pass_context,
    select_autoescape,
)
from jinja2.runtime import Context
from markupsafe import Markup

from .utils import TEMPLATE_SUFFIX, is_safe_name

logger = logging.getLogger(__name__)

PARTIALS_DIR = "partials"

# Used when a page asks for a template that does not exist.
FALLBACK_TEMPLATE = "{{ content }}"


class TemplateLoader(BaseLoader):
    """Loads templates and partials from a templates directory.

    Attributes:
        templates_dir: Directory holding ``<name>.jinja`` templates.
    """

    def __init__(self, templates_dir: Path):
        self.templates_dir = templates_dir

    def _path_for(self, name: str) -> Path | None:
        if not is_safe_name(name):
            return None
        filename = name if name.endswith(TEMPLATE_SUFFIX) else name + TEMPLATE_SUFFIX
        return self.templates_dir / filename

    def _read(self, name: str) -> str | None:
        path = self._path_for(name)
        if path is None or not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def load_template(self, name: str) -> str | None:
        """Return the source of a page template.

        Args:
            name: Template name without extension, e.g. ``default``.

        Returns:
            Template text, or None when it does not exist.
        """
        source = self._read(name)
        if source is None:
            logger.warning("Template %s not found in %s", name, self.templates_dir)
        return source

    def load_partial(self, name: str) -> str | None:
        """Return the source of a partial.

        Args:
            name: Partial name without extension, e.g. ``nav``.

        Returns:
            Partial text, or None when it does not exist.
        """
        if not is_safe_name(name):
            return None
        source = self._read(f"{PARTIALS_DIR}/{name}")
        if source is None:
            logger.warning("Partial %s not found in %s", name, self.templates_dir)
        return source

    def get_source(self, environment: Environment, template: str):
        """Jinja loader hook for includes, imports and extends.

        A missing partial loads as empty source, so ``{% include %}`` of an
        absent partial renders nothing. Other missing names raise
        TemplateNotFound.
        """
        path = self._path_for(template)
        if path is None or not path.is_file():
            if path is not None and template.startswith(PARTIALS_DIR + "/"):
                logger.warning(
                    "Partial %s not found in %s", template, self.templates_dir
                )
                return "", None, lambda: False
            raise TemplateNotFound(template)
        source = path.read_text(encoding="utf-8")
        mtime = path.stat().st_mtime

        def uptodate() -> bool:
            try:
                return path.stat().st_mtime == mtime
            except OSError:
                return False

        return source, str(path), uptodate


class TemplateEngine:
    """Expands Jinja template text against a context.

    Attributes:
        loader: Template and partial loader.
        env: Jinja2 environment for page templates (autoescaping).
        raw_env: Overlay without autoescaping, used for Markdown source.
    """

    def __init__(self, loader: TemplateLoader):
        self.loader = loader
        self.env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "jinja"], default=True),
            keep_trailing_newline=True,
            enable_async=False,
        )
        self.env.globals["partial"] = self._partial
        self.raw_env = self.env.overlay(autoescape=False)

    @pass_context
    def _partial(self, context: Context, name: str) -> Markup:
        """Render a partial with the calling template's context.

        Args:
            context: Active Jinja context.
            name: Partial name.

        Returns:
            Rendered partial, or empty markup if the partial is missing.
        """
        source = self.loader.load_partial(name)
        if source is None:
            return Markup("")
        env = context.environment
        return Markup(env.from_string(source).render(context.get_all()))

    def expand(self, template: str, context: dict[str, Any]) -> str:
        """Expand template text with autoescaping.

        Args:
            template: Template source.
            context: Variables available to the template.

        Returns:
            Rendered text.
        """
        return self.env.from_string(template).render(**context)

    def expand_raw(self, template: str, context: dict[str, Any]) -> str:
        """Expand template text without escaping values.

        Args:
            template: Template source, e.g. Markdown with ``{{ }}`` variables.
            context: Variables available to the template.

        Returns:
            Rendered text.
        """
        return self.raw_env.from_string(template).render(**context)

    def load_page_template(self, name: str) -> str:
        """Return a page template's source, or the fallback template."""
        source = self.loader.load_template(name)
        return FALLBACK_TEMPLATE if source is None else source
