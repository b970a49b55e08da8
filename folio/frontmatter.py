"""Front matter parsing for Folio.

Pages may start with a fenced block of ``key: value`` lines::

    ---
    title: Hello
    tags: intro, demo
    ---
    # Hi

The parser returns the remaining body as a suffix slice of the raw text together
with the metadata mapping. It never rewrites the input.

Key functions:
- parse_frontmatter: Split raw page text into body and metadata.
- FrontMatterParser: Class wrapper used by the indexer and pipeline.
"""

from __future__ import annotations

from pathlib import Path

FrontMatter = dict[str, str]

DELIMITER = "---"

# Keys with a meaning of their own; every other key is a taxonomy key.
TITLE_KEY = "title"
TEMPLATE_KEY = "template"
PARENT_KEY = "parent"
RESERVED_KEYS = frozenset({TITLE_KEY, TEMPLATE_KEY, PARENT_KEY})


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r\n") == DELIMITER


def parse_frontmatter(text: str) -> tuple[str, FrontMatter]:
    """Split page text into body and front matter.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (body, metadata). Without an opening ``---`` line the body is
        the whole input and the metadata is empty. Without a closing ``---``
        line the whole input is metadata and the body is empty.
    """
    metadata: FrontMatter = {}
    if not text.startswith((DELIMITER + "\n", DELIMITER + "\r\n")):
        return text, metadata

    pos = text.index("\n") + 1
    while pos < len(text):
        end = text.find("\n", pos)
        next_pos = len(text) if end == -1 else end + 1
        line = text[pos:next_pos]
        if _is_delimiter(line):
            return text[next_pos:], metadata
        key, sep, value = line.partition(":")
        key = key.strip()
        if sep and key:
            # First occurrence of a repeated key wins.
            metadata.setdefault(key, value.strip())
        pos = next_pos
    return "", metadata


class FrontMatterParser:
    """Reads front matter from strings or files."""

    def parse(self, text: str) -> tuple[str, FrontMatter]:
        return parse_frontmatter(text)

    def parse_file(self, path: Path) -> tuple[str, FrontMatter]:
        """Read a file and parse its front matter.

        Args:
            path: Path to a UTF-8 encoded content file.

        Returns:
            Tuple of (body, metadata).

        Raises:
            OSError: If the file cannot be read.
            UnicodeDecodeError: If the file is not valid UTF-8.
        """
        return parse_frontmatter(path.read_text(encoding="utf-8"))


def taxonomy_items(metadata: FrontMatter) -> list[tuple[str, str]]:
    """Return the (key, value) pairs of metadata that are taxonomy assignments."""
    return [(k, v) for k, v in metadata.items() if k not in RESERVED_KEYS]
