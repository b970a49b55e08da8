"""Render context assembly for Folio.

Every request gets a fresh RenderContext holding the request details, the site
config, the shared SiteIndex, and (once the pipeline has read the file) the
page's own front matter, rendered content and related page references.

Key classes:
- RequestInfo: Method, query path, resolved resource path and page name.
- RenderContext: Everything templates can see for one request.
- ContextBuilder: Creates a RenderContext for a resolved request.
- ReferenceResolver: Looks up related pages in the SiteIndex.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from markupsafe import Markup

from .frontmatter import PARENT_KEY, FrontMatter
from .taxonomy import SiteIndex
from .utils import last_segment

References = dict[str, list[Any]]


@dataclass
class RequestInfo:
    """Request details exposed to templates as ``request``.

    Attributes:
        method: HTTP method, e.g. ``GET``.
        query: Request path as received.
        resource_path: File the request path resolved to.
        page: Last segment of the request path.
    """

    method: str
    query: str
    resource_path: str
    page: str

    def to_dict(self) -> dict[str, str]:
        return {
            "method": self.method,
            "query": self.query,
            "resourcePath": self.resource_path,
            "page": self.page,
        }


@dataclass
class RenderContext:
    """The values available to template expansion for one request.

    Attributes:
        request: Request details.
        config: Site configuration mapping.
        site: The shared, read-only site index.
        page: Front matter of the file being rendered.
        content: Rendered HTML body of a Markdown page.
        references: Related page lists found by ReferenceResolver.
    """

    request: RequestInfo
    config: dict[str, Any]
    site: SiteIndex
    page: FrontMatter = field(default_factory=dict)
    content: str = ""
    references: References = field(default_factory=dict)

    def to_template(self) -> dict[str, Any]:
        """Return the mapping handed to template expansion."""
        return {
            "request": self.request.to_dict(),
            "config": self.config,
            "site": self.site.to_dict(),
            "page": dict(self.page),
            "content": Markup(self.content),
            "references": {
                key: [item.to_dict() for item in items]
                for key, items in self.references.items()
            },
        }


class ContextBuilder:
    """Builds the initial RenderContext for a request."""

    def build(
        self,
        method: str,
        query_path: str,
        resolved_path: Path | None,
        config: dict[str, Any],
        site: SiteIndex,
    ) -> RenderContext:
        """Create a context with request info, config and site filled in.

        Args:
            method: HTTP method.
            query_path: Request path as received.
            resolved_path: File the path resolved to, if any.
            config: Site configuration mapping.
            site: Site index built at startup.

        Returns:
            A new RenderContext with empty page, content and references.
        """
        request = RequestInfo(
            method=method,
            query=query_path,
            resource_path=resolved_path.as_posix() if resolved_path else "",
            page=last_segment(query_path),
        )
        return RenderContext(request=request, config=config, site=site)


class ReferenceResolver:
    """Finds pages related to the current request in the SiteIndex.

    With a ``parent`` key in the page's front matter, the request's page name is
    looked up as a term of that taxonomy and its pages become
    ``references["pages"]``. Without one, a page name that is itself a taxonomy
    key exposes that key's whole term list as ``references[<page>]``.
    """

    def resolve(self, context: RenderContext) -> References:
        """Compute references for a context and store them on it.

        Args:
            context: Context whose ``page`` front matter is already filled in.

        Returns:
            The references mapping, empty when nothing matches.
        """
        references: References = {}
        page = context.request.page
        parent = context.page.get(PARENT_KEY, "")
        site = context.site

        if parent and page:
            term = site.find_term(parent, page)
            if term is not None:
                references["pages"] = list(term.pages)
        elif page:
            terms = site.taxonomy.get(page)
            if terms is not None:
                references[page] = list(terms)

        context.references = references
        return references
