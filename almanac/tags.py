"""Tag aggregation for Almanac.

Groups post pages by tag and paginates each group into its own run under
``/tag/<tag>/``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .collections import PageCollection, TagCollection
from .links import Link, tag_link
from .pages import ListPage, PostPage
from .pagination import paginate, validate_page_size
from .utils import tag_url


def tag_index_path(tag: str) -> str:
    return f"/tag/{tag_url(tag)}/index.html"


def tag_page_path(tag: str) -> str:
    # Literal percent signs must survive the %i substitution
    return "/tag/{}/page/%i/index.html".format(tag_url(tag).replace("%", "%%"))


def tag_feed_base(tag: str) -> str:
    return f"/tag/{tag_url(tag)}"


def group_by_tag(post_pages: Iterable[PostPage]) -> TagCollection:
    """Group post pages by tag.

    A page with several tags appears in each of their groups. Order within
    a group follows the input order; tags are ordered by name. Tags with no
    pages never appear.
    """
    pages = PageCollection(post_pages)
    tags = dict.fromkeys(tag for page in pages for tag in page.tags)
    return TagCollection({tag: pages.with_tag(tag) for tag in tags})


class TagAggregator:
    """Builds per-tag list page runs.

    Attributes:
        page_size: Number of posts per list page.
        url_root: URL prefix of the application.
        template: Template handle for tag list pages.
        layout: Layout handle for tag list pages.
    """

    def __init__(
        self,
        page_size: int,
        url_root: str = "/",
        template: Any = None,
        layout: Any = None,
    ):
        self.page_size = validate_page_size(page_size)
        self.url_root = url_root
        self.template = template
        self.layout = layout

    def group(self, post_pages: Iterable[PostPage]) -> TagCollection:
        return group_by_tag(post_pages)

    def paginate(self, post_pages: Iterable[PostPage]) -> dict[str, list[ListPage]]:
        """Paginate every tag group, newest posts first.

        Returns:
            Mapping of tag to its run of list pages, in tag name order.
        """
        runs: dict[str, list[ListPage]] = {}
        for tag, pages in self.group(post_pages).items():
            runs[tag] = paginate(
                pages.sorted(),
                self.page_size,
                path=tag_page_path(tag),
                index=tag_index_path(tag),
                url_root=self.url_root,
                template=self.template,
                layout=self.layout,
            )
        return runs

    def links(self, post_pages: Iterable[PostPage]) -> list[Link]:
        """Return one link per tag, sorted by tag name."""
        return [tag_link(tag, self.url_root) for tag in self.group(post_pages)]
