"""Link value objects used for tag, feed and pagination navigation."""

from __future__ import annotations

from dataclasses import dataclass

from .utils import join_path, tag_url


@dataclass(frozen=True)
class Link:
    """An immutable hyperlink, compared by value.

    Attributes:
        text: Link text shown to readers.
        href: URL of the target.
        media_type: Optional MIME type of the target (e.g. ``application/rss+xml``).
        rel: Optional relation (e.g. ``next``, ``prev``, ``alternate``).
    """

    text: str
    href: str
    media_type: str | None = None
    rel: str | None = None


def tag_link(tag: str, url_root: str = "/") -> Link:
    """Return the link to a tag's listing (``<url_root>/tag/<tag>/``)."""
    return Link(text=tag, href=join_path(url_root, "tag", tag_url(tag), ""))
