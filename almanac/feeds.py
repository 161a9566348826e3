"""Feed generation for Almanac.

This module derives syndication feed pages (RSS, Atom) from the first page
of a paginated run and links every page of the run to those feeds.

The feed formats are an ordered list of FeedKind records, so new formats
can be added without modifying the binder (Open/Closed Principle).

Classes:
    FeedKind: One syndication format.
    FeedBinder: Creates feed pages for a run and attaches ``feed`` links.

Constants:
    DEFAULT_FEEDS: Atom and RSS, in that order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import ConfigError
from .links import Link
from .pages import FeedPage, ListPage
from .protocols import TemplateResolver
from .utils import join_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedKind:
    """A syndication format.

    Attributes:
        key: File extension of the feed (``rss``, ``atom``).
        text: Link text shown to readers.
        media_type: MIME type of the feed.
        template: Template name in the ``blog`` group.
    """

    key: str
    text: str
    media_type: str
    template: str


DEFAULT_FEEDS: tuple[FeedKind, ...] = (
    FeedKind(
        key="atom",
        text="Atom",
        media_type="application/atom+xml",
        template="index.atom",
    ),
    FeedKind(
        key="rss",
        text="RSS",
        media_type="application/rss+xml",
        template="index.rss",
    ),
)


def feed_kinds_from_config(entries: Iterable[dict[str, Any]]) -> tuple[FeedKind, ...]:
    """Build feed kinds from configuration mappings.

    Raises:
        ConfigError: If an entry is missing a field.
    """
    kinds = []
    for entry in entries:
        try:
            kinds.append(
                FeedKind(
                    key=str(entry["key"]),
                    text=str(entry["text"]),
                    media_type=str(entry["media_type"]),
                    template=str(entry["template"]),
                )
            )
        except (KeyError, TypeError) as exc:
            raise ConfigError(f"invalid feed definition {entry!r}: missing {exc}") from exc
    return tuple(kinds)


class FeedBinder:
    """Creates feed pages for paginated runs.

    Feed templates are resolved when the binder is created, so a missing
    template is reported before any page is produced.

    Attributes:
        feeds: Feed kinds, in output order.
        url_root: URL prefix used for feed link hrefs.
        templates: Resolved template handle for each feed key.
    """

    def __init__(
        self,
        feeds: Sequence[FeedKind] = DEFAULT_FEEDS,
        resolver: TemplateResolver | None = None,
        url_root: str = "/",
    ):
        """Initialize the binder.

        Args:
            feeds: Feed kinds to produce.
            resolver: Template resolver; when None, feed pages carry no template.
            url_root: URL prefix of the application.

        Raises:
            ConfigError: If a feed key is empty or repeated, or a template
                does not resolve.
        """
        keys = [feed.key for feed in feeds]
        if any(not key for key in keys):
            raise ConfigError("feed key must not be empty")
        if len(set(keys)) != len(keys):
            raise ConfigError(f"duplicate feed keys: {keys}")
        self.feeds = tuple(feeds)
        self.url_root = url_root
        self.templates: dict[str, Any] = {
            feed.key: resolver.template("blog", feed.template) if resolver else None
            for feed in self.feeds
        }

    def bind(self, run: Sequence[ListPage], base_path: str) -> list[FeedPage]:
        """Create feed pages for a run and link them from every page.

        Args:
            run: List pages of one paginated run.
            base_path: Path the feed key is appended to (``/index``,
                ``/tag/<tag>``).

        Returns:
            One FeedPage per feed kind, or an empty list for an empty run.
        """
        if not run:
            return []

        index = run[0]
        feed_pages: list[FeedPage] = []
        feed_links: list[Link] = []
        for feed in self.feeds:
            page = FeedPage(
                path=f"{base_path}.{feed.key}",
                template=self.templates[feed.key],
                page=index,
                media_type=feed.media_type,
            )
            feed_pages.append(page)
            feed_links.append(
                Link(
                    text=feed.text,
                    href=join_path(self.url_root, page.path),
                    media_type=feed.media_type,
                    rel="alternate",
                )
            )

        for page in run:
            page.links["feed"] = feed_links
        logger.debug("Bound %d feeds to %d pages at %s", len(feed_pages), len(run), base_path)
        return feed_pages
