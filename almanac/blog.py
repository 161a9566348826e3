"""Blog compilation for Almanac.

The BlogCompiler turns the documents of one blog into its complete, ordered
set of pages: paginated index listings, per-tag listings, feeds, collateral
files and individual post pages.

Key classes:
- IndexTagDirective: One ``+tag``/``-tag`` entry of the index filter.
- BlogCompiler: Orchestrates selection, page building, pagination and feeds.

Key functions:
- parse_index_tags: Parse ``+tag``/``-tag`` strings into directives.
- is_indexed: Decide whether a set of tags is shown on the index.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from .collections import PageCollection
from .content import DOCUMENT_SUFFIXES
from .errors import ConfigError
from .feeds import DEFAULT_FEEDS, FeedBinder, FeedKind
from .links import Link
from .pages import FilePage, Page, PageFactory, PostPage
from .pagination import paginate, validate_page_size
from .protocols import DocumentRepository, FileEnumerator, TemplateResolver
from .selector import DocumentSelector
from .tags import TagAggregator, tag_feed_base
from .utils import is_post_file, join_path

logger = logging.getLogger(__name__)

INDEX_PATH = "/index.html"
INDEX_PAGE_PATH = "/page/%i/index.html"
INDEX_FEED_BASE = "/index"


@dataclass(frozen=True)
class IndexTagDirective:
    """Include or exclude posts carrying a tag from the index."""

    include: bool
    tag: str

    def __str__(self) -> str:
        return f"{'+' if self.include else '-'}{self.tag}"


def parse_index_tags(specs: Iterable[str | IndexTagDirective]) -> tuple[IndexTagDirective, ...]:
    """Parse index tag directives.

    Args:
        specs: Strings such as ``"-draft"`` or ``"+featured"``.

    Returns:
        Directives in the order given.

    Raises:
        ConfigError: If an entry does not start with ``+`` or ``-`` or has
            no tag.
    """
    directives = []
    for spec in specs:
        if isinstance(spec, IndexTagDirective):
            directives.append(spec)
            continue
        if not isinstance(spec, str) or len(spec) < 2 or spec[0] not in "+-":
            raise ConfigError(f"index tag {spec!r} must be '+tag' or '-tag'")
        directives.append(IndexTagDirective(include=spec[0] == "+", tag=spec[1:]))
    return tuple(directives)


def is_indexed(tags: Iterable[str], directives: Sequence[IndexTagDirective]) -> bool:
    """Decide whether a post with these tags belongs on the index.

    A post starts included. Each directive whose tag the post carries sets
    the result; the last matching directive wins.

    Examples:
        >>> directives = parse_index_tags(["-foo", "+bar"])
        >>> is_indexed(["foo", "bar"], directives)
        True
        >>> is_indexed(["foo"], directives)
        False
    """
    tag_set = set(tags)
    included = True
    for directive in directives:
        if directive.tag in tag_set:
            included = directive.include
    return included


class BlogCompiler:
    """Compiles the pages of one blog.

    All configuration is validated and every template resolved when the
    compiler is created, so configuration mistakes surface before any page
    is produced.

    Attributes:
        store: Document repository.
        theme: Template resolver.
        url_root: URL prefix the blog is published under.
        page_size: Number of posts per list page.
        index_tags: Index filter directives.
        feeds: Feed kinds produced for every run.
        files: File enumerator for collateral files (defaults to the store).
    """

    def __init__(
        self,
        store: DocumentRepository,
        theme: TemplateResolver,
        *,
        url_root: str = "/",
        page_size: int = 5,
        index_tags: Iterable[str | IndexTagDirective] = (),
        feeds: Sequence[FeedKind] = DEFAULT_FEEDS,
        today: date | None = None,
        files: FileEnumerator | None = None,
    ):
        """Initialize the compiler.

        Args:
            store: Source of documents.
            theme: Template resolver.
            url_root: URL prefix of the blog.
            page_size: Posts per list page; must be positive.
            index_tags: ``+tag``/``-tag`` strings filtering the index.
            feeds: Feed kinds, in output order.
            today: Reference date; posts after it are withheld. Defaults to
                the current date at compile time.
            files: Collateral file source. Defaults to ``store`` when it can
                list files.

        Raises:
            ConfigError: If any setting is invalid or a template is missing.
        """
        self.store = store
        self.theme = theme
        self.url_root = "/" + url_root.strip("/") if url_root.strip("/") else "/"
        self.page_size = validate_page_size(page_size)
        self.index_tags = parse_index_tags(index_tags)
        self.feeds = tuple(feeds)
        if files is None and isinstance(store, FileEnumerator):
            files = store
        self.files = files
        self.selector = DocumentSelector(today)

        layout = theme.template("site", "layout.html")
        self.index_template = theme.template("blog", "index.html")
        self.layout = layout
        self.factory = PageFactory(
            url_root=self.url_root,
            template=theme.template("blog", "post.html"),
            layout=layout,
        )
        self.tag_aggregator = TagAggregator(
            self.page_size,
            url_root=self.url_root,
            template=self.index_template,
            layout=layout,
        )
        self.feed_binder = FeedBinder(self.feeds, theme, url_root=self.url_root)

        # Last complete post page snapshot; replaced, never mutated
        self._post_pages: tuple[PostPage, ...] = ()

    def post_pages(self) -> tuple[PostPage, ...]:
        """Build a page for every published post, newest first.

        The result also becomes the snapshot used by :meth:`tags` when no
        pages are passed explicitly.

        Raises:
            ParseError: If a post's date cannot be derived.
            RepositoryError: If the store cannot be read.
        """
        selected = self.selector.select(self.store.documents())
        pages = tuple(self.factory.build(item) for item in selected)
        self._post_pages = pages
        return pages

    @property
    def last_post_pages(self) -> tuple[PostPage, ...]:
        return self._post_pages

    def index(self, post_pages: Iterable[PostPage]) -> list[Page]:
        """Build the index run and its feeds.

        Posts are filtered by ``index_tags`` and ordered newest first.

        Returns:
            The index list pages followed by their feed pages. Empty when no
            post survives the filter.
        """
        indexed = PageCollection(
            page for page in post_pages if is_indexed(page.tags, self.index_tags)
        )
        run = paginate(
            indexed.sorted(),
            self.page_size,
            path=INDEX_PAGE_PATH,
            index=INDEX_PATH,
            url_root=self.url_root,
            template=self.index_template,
            layout=self.layout,
        )
        feed_pages = self.feed_binder.bind(run, INDEX_FEED_BASE)
        return [*run, *feed_pages]

    def tag_pages(self, post_pages: Iterable[PostPage]) -> list[Page]:
        """Build a run and feeds for every tag, in tag name order."""
        pages: list[Page] = []
        for tag, run in self.tag_aggregator.paginate(post_pages).items():
            pages.extend(run)
            pages.extend(self.feed_binder.bind(run, tag_feed_base(tag)))
        return pages

    def post_files(self) -> list[FilePage]:
        """Collect collateral files stored inside post directories."""
        if self.files is None:
            return []
        return [
            FilePage(path=path, source=self.files.open_file(path))
            for path in self.files.find_files()
            if is_post_file(path) and not path.lower().endswith(DOCUMENT_SUFFIXES)
        ]

    def pages(self) -> list[Page]:
        """Return every page of the blog.

        Order: index pages and feeds, tag pages and feeds, collateral files,
        post pages.
        """
        post_pages = self.post_pages()
        pages = [
            *self.index(post_pages),
            *self.tag_pages(post_pages),
            *self.post_files(),
            *post_pages,
        ]
        logger.info(
            "Compiled %d pages (%d posts) for %s", len(pages), len(post_pages), self.url_root
        )
        return pages

    def tags(self, post_pages: Iterable[PostPage] | None = None) -> list[Link]:
        """Return a link to every tag, sorted by tag name.

        Args:
            post_pages: Pages to collect tags from. Defaults to the last
                :meth:`post_pages` snapshot.
        """
        pages = self._post_pages if post_pages is None else post_pages
        return self.tag_aggregator.links(pages)

    def recent_posts(self, count: int, tags: str | None = None) -> list[PostPage]:
        """Return the most recent posts.

        Args:
            count: Maximum number of posts.
            tags: Only return posts carrying this tag.

        Returns:
            Post pages, newest first, with paths prefixed by the URL root so
            they can be linked from outside the blog. Each page is marked
            ``rooted``.
        """
        pages: list[PostPage] = []
        if count <= 0:
            return pages
        for item in self.selector.select(self.store.documents()):
            if tags is not None and tags not in item.tags:
                continue
            page = self.factory.build(item)
            page.path = join_path(self.url_root, page.path)
            page.rooted = True
            pages.append(page)
            if len(pages) >= count:
                break
        return pages

    def page_url(self, page: Page) -> str:
        """Return the URL of a page, dropping a trailing ``index.html``.

        Paths are prefixed with the URL root unless the page is marked
        ``rooted`` (as :meth:`recent_posts` pages are).
        """
        url = page.path if page.rooted else join_path(self.url_root, page.path)
        if url.endswith("/index.html"):
            url = url[: -len("index.html")]
        return url

