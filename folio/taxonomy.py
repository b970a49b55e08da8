"""Site index and taxonomy building for Folio.

This module walks the static content tree once at startup and builds the
SiteIndex that every request reads: a map of page links to titles, and one
list of terms per taxonomy key found in front matter.

Key classes:
- PageRef: Title and link of a page listed under a term.
- TaxonomyTerm: One distinct value of a taxonomy key with its pages.
- SiteIndex: The immutable index shared by all requests.
- TaxonomyIndexer: Walks a directory and builds a SiteIndex.

Design principles:
- The index is an explicit value handed to each request, never module state.
- Walking is sorted by name so term titles and page order are reproducible.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .frontmatter import TITLE_KEY, FrontMatterParser, taxonomy_items
from .utils import bare_name, is_markdown, page_link, slugify_term

logger = logging.getLogger(__name__)

DEFAULT_MULTI_VALUED = ("tags",)


@dataclass(frozen=True)
class PageRef:
    """Reference to a page from a taxonomy term.

    Attributes:
        title: Page title, or its bare file name when it has none.
        link: Link path without extension, e.g. ``/blog/post``.
    """

    title: str
    link: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "link": self.link}


@dataclass
class TaxonomyTerm:
    """One distinct value seen for a taxonomy key.

    Attributes:
        name: Lowercase dashed slug, unique within its key.
        title: Label as first written in front matter.
        pages: Pages carrying this term, in visit order.
    """

    name: str
    title: str
    pages: list[PageRef] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "pages": [page.to_dict() for page in self.pages],
        }


@dataclass(frozen=True)
class SiteIndex:
    """Index of all content files and their taxonomy terms.

    Attributes:
        files: Mapping of page link to page title (or bare file name).
        taxonomy: Mapping of taxonomy key to its terms.
    """

    files: dict[str, str] = field(default_factory=dict)
    taxonomy: dict[str, list[TaxonomyTerm]] = field(default_factory=dict)

    def terms(self, key: str) -> list[TaxonomyTerm]:
        """Return the terms for a taxonomy key, or an empty list."""
        return self.taxonomy.get(key, [])

    def find_term(self, key: str, name: str) -> TaxonomyTerm | None:
        """Return the term with slug ``name`` under ``key``, if any."""
        for term in self.terms(key):
            if term.name == name:
                return term
        return None

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping form, used for templates and JSON output."""
        return {
            "files": dict(self.files),
            "taxonomy": {
                key: [term.to_dict() for term in terms]
                for key, terms in self.taxonomy.items()
            },
        }


class _TaxonomyBuilder:
    """Accumulates terms per key while files are visited."""

    def __init__(self, multi_valued: Iterable[str]):
        self.multi_valued = frozenset(multi_valued)
        self._terms: dict[str, dict[str, TaxonomyTerm]] = {}

    def add(self, key: str, value: str, ref: PageRef) -> None:
        for label in self._split(key, value):
            slug = slugify_term(label)
            terms = self._terms.setdefault(key, {})
            term = terms.get(slug)
            if term is None:
                term = terms[slug] = TaxonomyTerm(name=slug, title=label)
            elif term.title != label:
                logger.debug(
                    "Term %r under %r also written as %r; keeping %r",
                    slug,
                    key,
                    label,
                    term.title,
                )
            if ref not in term.pages:
                term.pages.append(ref)

    def _split(self, key: str, value: str) -> list[str]:
        if key in self.multi_valued:
            tokens = (token.strip() for token in value.split(","))
        else:
            tokens = iter([value.strip()])
        return [token for token in tokens if token]

    def build(self) -> dict[str, list[TaxonomyTerm]]:
        return {key: list(terms.values()) for key, terms in self._terms.items()}


class TaxonomyIndexer:
    """Builds a SiteIndex from a content directory.

    Attributes:
        root_dir: Directory holding the content tree (usually ``static``).
        multi_valued: Front matter keys whose values are comma separated lists.
        parser: Front matter parser.
    """

    def __init__(
        self,
        root_dir: Path,
        multi_valued: Iterable[str] = DEFAULT_MULTI_VALUED,
        parser: FrontMatterParser | None = None,
    ):
        self.root_dir = root_dir
        self.multi_valued = tuple(multi_valued)
        self.parser = parser or FrontMatterParser()

    def iter_files(self) -> Iterator[Path]:
        """Yield every Markdown file under the root, sorted by path.

        Unreadable directories are logged and skipped. A directory reached a
        second time through a symlink is not walked again.
        """
        yield from self._walk(self.root_dir, set())

    def _walk(self, directory: Path, seen: set[Path]) -> Iterator[Path]:
        try:
            real = directory.resolve()
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            logger.warning("Skipping unreadable directory %s: %s", directory, exc)
            return
        if real in seen:
            logger.debug("Skipping already visited directory %s", directory)
            return
        seen.add(real)
        for entry in entries:
            if entry.is_dir():
                yield from self._walk(entry, seen)
            elif is_markdown(entry):
                yield entry

    def build(self) -> SiteIndex:
        """Walk the content tree and build the index.

        Returns:
            A new SiteIndex. A missing root yields an empty index.
        """
        files: dict[str, str] = {}
        builder = _TaxonomyBuilder(self.multi_valued)
        if not self.root_dir.is_dir():
            logger.warning("Content directory %s does not exist", self.root_dir)
            return SiteIndex()

        for path in self.iter_files():
            try:
                _, metadata = self.parser.parse_file(path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable file %s: %s", path, exc)
                continue
            link = page_link(path.relative_to(self.root_dir))
            title = metadata.get(TITLE_KEY) or bare_name(path)
            files[link] = title
            ref = PageRef(title=title, link=link)
            for key, value in taxonomy_items(metadata):
                builder.add(key, value, ref)

        index = SiteIndex(files=files, taxonomy=builder.build())
        logger.info(
            "Indexed %d pages across %d taxonomies", len(files), len(index.taxonomy)
        )
        return index


def build_index(
    root_dir: Path, multi_valued: Iterable[str] = DEFAULT_MULTI_VALUED
) -> SiteIndex:
    """Build a SiteIndex for ``root_dir``.

    Args:
        root_dir: Directory holding the content tree.
        multi_valued: Keys whose values are comma separated lists.

    Returns:
        The built SiteIndex.
    """
    return TaxonomyIndexer(root_dir, multi_valued).build()
