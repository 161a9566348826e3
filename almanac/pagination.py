"""Pagination for Almanac.

Splits an ordered sequence of pages into fixed-size list pages. The first
page of a run is written to the run's index path; later pages use a
numbered path template with a ``%i`` placeholder.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from .errors import ConfigError
from .links import Link
from .pages import ListPage, Page
from .utils import join_path

logger = logging.getLogger(__name__)


def validate_page_size(page_size: Any) -> int:
    """Check that a page size is a positive integer.

    Raises:
        ConfigError: If the page size is not a positive integer.
    """
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise ConfigError(f"page_size must be a positive integer, got {page_size!r}")
    return page_size


def paginate(
    pages: Sequence[Page],
    page_size: int,
    path: str,
    index: str,
    url_root: str = "/",
    template: Any = None,
    layout: Any = None,
) -> list[ListPage]:
    """Split pages into a run of list pages.

    Args:
        pages: Ordered member pages.
        page_size: Maximum number of members per list page.
        path: Path template for pages 2..N, containing ``%i``.
        index: Path of page 1.
        url_root: URL prefix used for the ``prev``/``next`` links.
        template: Template handle for every list page.
        layout: Layout handle for every list page.

    Returns:
        List pages numbered 1..N, or an empty list when there are no members.

    Raises:
        ConfigError: If page_size is not positive or path has no ``%i``.
    """
    validate_page_size(page_size)
    if "%i" not in path:
        raise ConfigError(f"pagination path {path!r} has no %i placeholder")

    chunks = [list(pages[i : i + page_size]) for i in range(0, len(pages), page_size)]
    paths = [index] + [path % number for number in range(2, len(chunks) + 1)]

    run: list[ListPage] = []
    for number, members in enumerate(chunks, start=1):
        links: dict[str, list[Link]] = {}
        if number > 1:
            href = join_path(url_root, paths[number - 2])
            links["prev"] = [Link(text="Newer", href=href, rel="prev")]
        if number < len(chunks):
            href = join_path(url_root, paths[number])
            links["next"] = [Link(text="Older", href=href, rel="next")]
        run.append(
            ListPage(
                path=paths[number - 1],
                template=template,
                layout=layout,
                links=links,
                pages=members,
                number=number,
                is_index=number == 1,
            )
        )
    logger.debug("Paginated %d pages into %d list pages at %s", len(pages), len(run), index)
    return run
