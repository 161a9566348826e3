"""Document selection for Almanac.

Decides which documents are blog posts, which of them are published as of
a reference date, and in what order they appear.

A document's effective date is resolved exactly once here, either from its
explicit front matter date or from a ``/YYYY/MM/DD/slug`` path, so that
later stages never need to re-parse paths.

Key classes:
- ExplicitDate / PathDate: Where an effective date came from.
- SelectedDocument: A document paired with its effective date.
- DocumentSelector: Filters and orders documents.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from .content import Document
from .utils import extract_date_from_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExplicitDate:
    """Date taken from the document's front matter."""

    value: datetime


@dataclass(frozen=True)
class PathDate:
    """Date parsed from the document's ``/YYYY/MM/DD/`` path."""

    value: datetime


EffectiveDate = ExplicitDate | PathDate


def resolve_date(document: Document) -> EffectiveDate | None:
    """Resolve the effective date of a document.

    Args:
        document: Document to inspect.

    Returns:
        ExplicitDate when front matter has a date, else PathDate when the
        path is dated, else None.

    Raises:
        ParseError: If the path looks dated but the date does not exist.
    """
    path_date = extract_date_from_path(document.path)
    if document.date is not None:
        return ExplicitDate(document.date)
    if path_date is not None:
        return PathDate(path_date)
    return None


@dataclass(frozen=True)
class SelectedDocument:
    """A published document and its resolved date."""

    document: Document
    effective: EffectiveDate

    @property
    def date(self) -> datetime:
        return self.effective.value

    @property
    def path(self) -> str:
        return self.document.path

    @property
    def tags(self) -> tuple[str, ...]:
        return self.document.tags


class DocumentSelector:
    """Selects the documents eligible for publication.

    Attributes:
        today: Reference date. When None, the current local date is read on
            every call to :meth:`select`.
    """

    def __init__(self, today: date | None = None):
        self.today = today

    def reference_date(self) -> date:
        return self.today if self.today is not None else date.today()

    def select(self, documents: Iterable[Document]) -> list[SelectedDocument]:
        """Filter and order documents.

        Documents without a derivable date are not posts and are skipped.
        Documents dated after the reference date are withheld. The rest are
        ordered newest first; documents sharing a date keep the order they
        were given in.

        Args:
            documents: Documents from the repository.

        Returns:
            Selected documents, most recent first.

        Raises:
            ParseError: If a dated path holds an impossible date.
        """
        today = self.reference_date()
        selected: list[SelectedDocument] = []
        for document in documents:
            effective = resolve_date(document)
            if effective is None:
                continue
            if effective.value.date() > today:
                logger.debug("Withholding future post %s (%s)", document.path, effective.value)
                continue
            selected.append(SelectedDocument(document, effective))
        selected.sort(key=lambda item: item.date, reverse=True)
        return selected
