"""Page types for Almanac.

A page is one unit of compiled output bound to one output path. The
compiler produces pages; the build renders and writes them.

Key classes:
- Page: Base dataclass with path, template/layout handles and link groups.
- PostPage: One blog post.
- ListPage: One page of a paginated listing.
- FeedPage: A syndication feed of the first page of a listing.
- FilePage: A file copied to the output unchanged.
- PageFactory: Builds a PostPage from a document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .content import Document
from .errors import ParseError
from .links import Link, tag_link
from .renderers import render_markdown
from .selector import SelectedDocument, resolve_date
from .utils import is_safe_tag, page_path


@dataclass(kw_only=True)
class Page:
    """Base class for every compiled page.

    Attributes:
        path: Output path relative to the application root, with a leading slash.
        template: Template handle used to render the page body.
        layout: Layout handle wrapped around the rendered body, if any.
        links: Named groups of links (``tags``, ``feed``, ``crosspost``...).
        rooted: True when ``path`` already starts with the application's URL root.
    """

    path: str
    template: Any = None
    layout: Any = None
    links: dict[str, list[Link]] = field(default_factory=dict)
    rooted: bool = False

    @property
    def date(self) -> datetime | None:
        return None

    def links_for(self, name: str) -> list[Link]:
        """Return a link group, or an empty list when it is not set."""
        return self.links.get(name, [])

    def variables(self) -> dict[str, Any]:
        """Return the template variables a renderer needs for this page."""
        return {}


@dataclass(kw_only=True)
class PostPage(Page):
    """A page for a single blog post."""

    document: Document
    published: datetime

    @property
    def date(self) -> datetime:
        return self.published

    @property
    def title(self) -> str:
        return self.document.title

    @property
    def tags(self) -> tuple[str, ...]:
        return self.document.tags

    def sections(self) -> list[str]:
        """Rendered HTML of each ``---`` separated section of the post."""
        return [render_markdown(section) for section in self.document.sections()]

    def variables(self) -> dict[str, Any]:
        sections = self.sections()
        return {
            "title": self.document.title,
            "author": self.document.author,
            "date": self.published,
            "content": "\n".join(sections),
            "sections": sections,
            "tags": self.links_for("tags"),
            "crosspost": self.links_for("crosspost"),
            "document": self.document,
        }


@dataclass(kw_only=True)
class ListPage(Page):
    """One page of a paginated run.

    Attributes:
        pages: Member pages, in listing order.
        number: 1-based position of this page in its run.
        is_index: True only for the first page of a run.
    """

    pages: list[Page]
    number: int = 1
    is_index: bool = False

    @property
    def date(self) -> datetime | None:
        dates = [page.date for page in self.pages if page.date is not None]
        return max(dates) if dates else None

    def variables(self) -> dict[str, Any]:
        return {
            "pages": self.pages,
            "number": self.number,
            "prev": self.links_for("prev"),
            "next": self.links_for("next"),
            "feeds": self.links_for("feed"),
        }


@dataclass(kw_only=True)
class FeedPage(Page):
    """A feed (RSS, Atom...) of the first page of a run.

    Attributes:
        page: The wrapped list page.
        media_type: MIME type of the feed.
    """

    page: ListPage
    media_type: str

    @property
    def date(self) -> datetime | None:
        return self.page.date

    def variables(self) -> dict[str, Any]:
        return {
            "pages": self.page.pages,
            "page": self.page,
            "updated": self.page.date,
        }


@dataclass(kw_only=True)
class FilePage(Page):
    """A collateral file (image, attachment...) copied unchanged.

    Attributes:
        source: Location of the file in the store.
    """

    source: Path


class PageFactory:
    """Builds post pages from documents.

    Attributes:
        url_root: URL prefix of the application, used for tag links.
        template: Template handle for post pages.
        layout: Layout handle for post pages.
        extension: Extension given to output paths.
    """

    def __init__(
        self,
        url_root: str = "/",
        template: Any = None,
        layout: Any = None,
        extension: str = ".html",
    ):
        self.url_root = url_root
        self.template = template
        self.layout = layout
        self.extension = extension

    def build(self, item: SelectedDocument | Document) -> PostPage:
        """Build a PostPage.

        Args:
            item: A selected document, or a bare document whose date will be
                resolved here.

        Returns:
            PostPage for the document.

        Raises:
            ParseError: If no date can be derived for the document or a tag
                cannot be used as a path segment.
        """
        if isinstance(item, SelectedDocument):
            document, published = item.document, item.date
        else:
            document = item
            effective = resolve_date(document)
            if effective is None:
                raise ParseError(document.path, "cannot derive date")
            published = effective.value

        tags: list[Link] = []
        for tag in document.tags:
            if not is_safe_tag(tag):
                raise ParseError(document.path, f"tag {tag!r} cannot be used in a path")
            link = tag_link(tag, self.url_root)
            if link not in tags:
                tags.append(link)

        links: dict[str, list[Link]] = {"tags": tags}
        if document.crosspost:
            links["crosspost"] = list(document.crosspost)

        return PostPage(
            path=page_path(document.path, self.extension),
            template=self.template,
            layout=self.layout,
            links=links,
            document=document,
            published=published,
        )
