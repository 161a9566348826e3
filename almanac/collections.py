from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from .pages import PostPage


class PageCollection(Sequence[PostPage]):
    """Lightweight helper for working with lists of post pages in templates and code."""

    def __init__(self, pages: Iterable[PostPage]):
        self._pages = list(pages)

    def __iter__(self) -> Iterator[PostPage]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        return self._pages[item]

    def with_tag(self, tag: str) -> PageCollection:
        return PageCollection(p for p in self._pages if tag in p.tags)

    def sorted(self, reverse: bool = True) -> PageCollection:
        """Sort pages by date, then by output path.

        Args:
            reverse: If True (default), newest first.

        Returns:
            A new PageCollection with sorted pages.
        """
        return PageCollection(
            sorted(self._pages, key=lambda p: (p.date, p.path), reverse=reverse)
        )

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageCollection({len(self._pages)} pages)"


class TagCollection(Mapping[str, PageCollection]):
    """Mapping of tag name to PageCollection, iterated in tag name order."""

    def __init__(self, mapping: Mapping[str, Iterable[PostPage]]):
        self._mapping = {k: PageCollection(mapping[k]) for k in sorted(mapping)}

    def __getitem__(self, key: str) -> PageCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
