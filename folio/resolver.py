"""URL to file resolution for Folio.

Maps a request path to a file under the static directory by trying candidates
in a fixed order. The first existing regular file wins:

1. ``static<path>``
2. ``static<path>/index.html``
3. ``static<path>/index.md``
4. ``static<path>.html``
5. ``static<path>.md``
6. ``<parent of static<path>>/children.html``
7. ``<parent of static<path>>/children.md``
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

INDEX_NAMES = ("index.html", "index.md")
SUFFIXES = (".html", ".md")
CHILDREN_NAMES = ("children.html", "children.md")


class ResourceResolver:
    """Resolves request paths to files under a static root.

    Attributes:
        static_dir: Directory that request paths are relative to.
    """

    def __init__(self, static_dir: Path):
        self.static_dir = static_dir

    def candidates(self, request_path: str) -> list[Path]:
        """Return the candidate files for a request path, in lookup order.

        Args:
            request_path: URL path such as ``/blog/post``.

        Returns:
            Ordered list of paths to try.
        """
        relative = request_path.strip("/")
        base = self.static_dir / relative if relative else self.static_dir
        found = [base]
        found.extend(base / name for name in INDEX_NAMES)
        if relative:
            found.extend(base.with_name(base.name + suffix) for suffix in SUFFIXES)
            found.extend(base.parent / name for name in CHILDREN_NAMES)
        return found

    def resolve(self, request_path: str) -> Path | None:
        """Resolve a request path to an existing file.

        Args:
            request_path: URL path such as ``/blog/post``.

        Returns:
            Path of the first matching file, or None when nothing matches.
        """
        for candidate in self.candidates(request_path):
            if self._is_served_file(candidate):
                logger.debug("Resolved %s to %s", request_path, candidate)
                return candidate
        logger.debug("No resource for %s", request_path)
        return None

    def _is_served_file(self, candidate: Path) -> bool:
        if not candidate.is_file():
            return False
        try:
            candidate.resolve().relative_to(self.static_dir.resolve())
        except ValueError:
            logger.warning("Refusing path outside %s: %s", self.static_dir, candidate)
            return False
        return True
