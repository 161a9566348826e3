"""Document loading for Almanac.

This module reads blog documents (Markdown with YAML front matter) from a
directory and turns them into immutable Document objects. It is the
file-based implementation of the DocumentRepository protocol.

Key classes:
- Document: Frozen dataclass representing one post and its metadata.
- DocumentStore: Reads, lists and writes documents under a root directory.

Key functions:
- extract_frontmatter: Split YAML front matter from the document body.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import ParseError, RepositoryError
from .links import Link
from .utils import parse_date, to_store_path

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)
SECTION_RE = re.compile(r"^---\s*$", re.MULTILINE)
DOCUMENT_SUFFIXES = (".markdown", ".md")


@dataclass(frozen=True)
class Document:
    """A single blog post as read from the store.

    Attributes:
        path: Store path with a leading slash (e.g. ``/2024/06/01/hi/index.markdown``).
        title: Post title.
        content: Raw Markdown body, without front matter.
        tags: Tags in the order they were written.
        date: Explicit date from front matter, if any.
        author: Optional author name.
        crosspost: Links to copies of this post on other sites.
        data: Remaining front matter keys.
    """

    path: str
    title: str = ""
    content: str = ""
    tags: tuple[str, ...] = ()
    date: datetime | None = None
    author: str | None = None
    crosspost: tuple[Link, ...] = ()
    data: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def has_date(self) -> bool:
        return self.date is not None

    def sections(self) -> list[str]:
        """Split the content on ``---`` divider lines.

        The first section is the summary shown on listings and feeds.
        """
        return [section.strip("\n") for section in SECTION_RE.split(self.content)]


def extract_frontmatter(text: str, path: str = "") -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content.

    Args:
        text: Raw file content.
        path: Store path, used in error messages.

    Returns:
        Tuple of (frontmatter dict, remaining content).

    Raises:
        RepositoryError: If the front matter is not valid YAML or not a mapping.
        ParseError: If YAML reads an impossible timestamp (``2024-02-30``).
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise RepositoryError(path, f"invalid front matter: {exc}", exc) from exc
    except ValueError as exc:
        # PyYAML builds date/datetime objects while loading
        raise ParseError(path, f"cannot derive date ({exc})") from exc
    if not isinstance(data, dict):
        raise RepositoryError(path, "front matter must be a mapping")
    return data, text[match.end() :]


def _parse_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        items = str(value).split(",")
    tags: list[str] = []
    for item in items:
        tag = item.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def _parse_crosspost(value: Any, path: str) -> tuple[Link, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise RepositoryError(path, "crosspost must be a list of {title, href} mappings")
    links = []
    for entry in value:
        if not isinstance(entry, dict) or "href" not in entry:
            raise RepositoryError(path, f"crosspost entry {entry!r} must be a mapping with href")
        text = entry.get("title") or entry.get("text") or entry["href"]
        links.append(Link(text=str(text), href=str(entry["href"])))
    return tuple(links)


def parse_document(path: str, text: str) -> Document:
    """Build a Document from the raw text of a file.

    Args:
        path: Store path of the document.
        text: Raw file content including front matter.

    Returns:
        Document instance.

    Raises:
        RepositoryError: If the front matter cannot be parsed.
        ParseError: If the front matter holds an unreadable date.
    """
    frontmatter, body = extract_frontmatter(text, path)
    data = dict(frontmatter)
    return Document(
        path=path,
        title=str(data.pop("title", "") or ""),
        content=body,
        tags=_parse_tags(data.pop("tags", None)),
        date=parse_date(data.pop("date", None), path),
        author=data.pop("author", None),
        crosspost=_parse_crosspost(data.pop("crosspost", None), path),
        data=data,
    )


def dump_document(document: Document) -> str:
    """Serialize a Document back to front matter plus content."""
    frontmatter: dict[str, Any] = {"title": document.title}
    if document.author:
        frontmatter["author"] = document.author
    if document.tags:
        frontmatter["tags"] = list(document.tags)
    if document.date is not None:
        frontmatter["date"] = document.date.strftime("%Y-%m-%d %H:%M:%S")
    if document.crosspost:
        frontmatter["crosspost"] = [
            {"title": link.text, "href": link.href} for link in document.crosspost
        ]
    frontmatter.update(document.data)
    header = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
    return f"---\n{header}---\n{document.content}"


class DocumentStore:
    """Reads and writes documents under a directory.

    Documents are ``*.markdown`` or ``*.md`` files. Anything under a
    directory whose name starts with ``_`` is ignored. Files are always
    visited in sorted path order so repeated builds see the same sequence.

    Attributes:
        root: Directory holding the documents.
    """

    def __init__(self, root: Path):
        """Initialize the store.

        Args:
            root: Path to the document directory.
        """
        self.root = root

    def _iter_paths(self) -> Iterator[Path]:
        if not self.root.exists():
            raise RepositoryError(str(self.root), "document directory does not exist")
        for path in sorted(self.root.rglob("*")):
            if path.is_dir():
                continue
            rel = path.relative_to(self.root)
            if any(part.startswith("_") for part in rel.parts[:-1]):
                continue
            yield path

    def documents(self) -> list[Document]:
        """Read every document in the store.

        Returns:
            Documents in sorted path order.

        Raises:
            RepositoryError: If a file cannot be read or parsed.
        """
        documents: list[Document] = []
        for path in self._iter_paths():
            if path.suffix.lower() not in DOCUMENT_SUFFIXES:
                continue
            documents.append(self.read_document(to_store_path(path, self.root)))
        logger.debug("Read %d documents from %s", len(documents), self.root)
        return documents

    def read_document(self, path: str) -> Document:
        """Read a single document by store path.

        Raises:
            RepositoryError: If the file cannot be read or parsed.
        """
        full_path = self.root / path.lstrip("/")
        try:
            text = full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RepositoryError(path, f"cannot read document: {exc}", exc) from exc
        return parse_document(path, text)

    def find_files(self) -> list[str]:
        """List every non-document file as a store path."""
        return [
            to_store_path(path, self.root)
            for path in self._iter_paths()
            if path.suffix.lower() not in DOCUMENT_SUFFIXES
        ]

    def open_file(self, path: str) -> Path:
        """Return the filesystem location of a store file."""
        return self.root / path.lstrip("/")

    def write_document(self, path: str, document: Document) -> Path:
        """Write a document to the store.

        Args:
            path: Store path to write to.
            document: Document to serialize.

        Returns:
            Full filesystem path of the written file.

        Raises:
            RepositoryError: If the file cannot be written.
        """
        full_path = self.root / path.lstrip("/")
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(dump_document(document), encoding="utf-8")
        except OSError as exc:
            raise RepositoryError(path, f"cannot write document: {exc}", exc) from exc
        return full_path
