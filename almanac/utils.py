"""Utility functions for Almanac.

This module contains the small string, path and date helpers shared by the
compiler, the document store and the command line.

Key functions:
    make_slug: Convert a post title to a URL slug.
    tag_url: Convert a tag to its URL-safe form.
    collapse_slashes: Collapse repeated path separators.
    page_path: Turn a document path into an output page path.
    extract_date_from_path: Extract a date from a /YYYY/MM/DD/slug path.
    parse_date: Coerce a front-matter date value into a datetime.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from datetime import date, datetime
from pathlib import Path

from .errors import ParseError

POST_PATH_RE = re.compile(
    r"/(?P<year>\d{4})/(?P<month>\d{2})/(?P<day>\d{2})/[^/]+(?:/index\.[^/]+)?$"
)
POST_DIR_RE = re.compile(r"^/(\d{4})/(\d{2})/(\d{2})/[^/]+/")
DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


def make_slug(title: str) -> str:
    """Convert a title into a slug.

    Runs of non-word characters become a single hyphen, leading and
    trailing hyphens are dropped and the result is lower-cased.

    Args:
        title: Post title.

    Returns:
        URL-friendly slug.

    Examples:
        >>> make_slug("Hello, World!")
        'hello-world'
    """
    return re.sub(r"\W+", "-", title).strip("-").lower()


def tag_url(tag: str) -> str:
    """Return the URL-safe form of a tag (whitespace runs become hyphens).

    Examples:
        >>> tag_url("open source")
        'open-source'
    """
    return re.sub(r"\s+", "-", tag)


def is_safe_tag(tag: str) -> bool:
    """Check that a tag can be used as a single output path segment.

    Examples:
        >>> is_safe_tag("perl")
        True
        >>> is_safe_tag("../../escape")
        False
    """
    segment = tag_url(tag)
    return bool(segment) and "/" not in segment and "\\" not in segment and segment not in (".", "..")


def collapse_slashes(path: str) -> str:
    """Collapse repeated forward slashes into one."""
    return re.sub(r"/{2,}", "/", path)


def page_path(doc_path: str, extension: str = ".html") -> str:
    """Derive an output page path from a document path.

    Args:
        doc_path: Store path of the document (e.g. ``/2024/06/01/hi/index.markdown``).
        extension: Extension of rendered pages, including the dot.

    Returns:
        Path with its extension replaced and repeated slashes collapsed.
    """
    path = collapse_slashes(doc_path)
    return re.sub(r"\.\w+$", extension, path)


def join_path(*parts: str) -> str:
    """Join URL path parts with single forward slashes.

    A trailing slash on the last part is preserved.
    """
    return collapse_slashes("/".join(parts))


def extract_date_from_path(path: str) -> datetime | None:
    """Extract a date from a dated post path.

    Args:
        path: Store path such as ``/2024/06/01/my-post/index.markdown``.

    Returns:
        datetime at midnight of the date found, or None if the path is not
        a dated post path.

    Raises:
        ParseError: If the path is dated but the date does not exist.

    Examples:
        >>> extract_date_from_path("/2024/06/01/launch.markdown")
        datetime.datetime(2024, 6, 1, 0, 0)

        >>> extract_date_from_path("/about.markdown") is None
        True
    """
    match = POST_PATH_RE.search(collapse_slashes(path))
    if not match:
        return None
    try:
        return datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
        )
    except ValueError as exc:
        raise ParseError(path, f"cannot derive date from path ({exc})") from exc


def parse_date(value: object, path: str = "") -> datetime | None:
    """Coerce a front-matter date value into a datetime.

    YAML already turns ``2024-06-01`` into a date; strings in the
    ``YYYY-MM-DD[ HH:MM[:SS]]`` forms are parsed here.

    Args:
        value: Raw value from front matter.
        path: Document path, used in error messages.

    Returns:
        datetime, or None when no date was given.

    Raises:
        ParseError: If a value is present but cannot be read as a date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        # Naive local time so explicit and path dates stay comparable
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ParseError(path, f"cannot derive date from {text!r}")


def is_post_file(path: str) -> bool:
    """Check whether a store path lives inside a dated post directory."""
    return POST_DIR_RE.match(path) is not None


def to_store_path(path: Path, root: Path) -> str:
    """Convert a filesystem path to a store path with a leading slash."""
    return "/" + path.relative_to(root).as_posix()


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)
