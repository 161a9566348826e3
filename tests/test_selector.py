from datetime import date, datetime

import pytest

from almanac.content import Document
from almanac.errors import ParseError
from almanac.selector import DocumentSelector, ExplicitDate, PathDate, resolve_date


def test_resolve_date_prefers_explicit_date():
    explicit = Document(path="/2024/05/01/a/index.markdown", date=datetime(2024, 5, 3, 9, 0))
    assert resolve_date(explicit) == ExplicitDate(datetime(2024, 5, 3, 9, 0))

    from_path = Document(path="/2024/05/01/a/index.markdown")
    assert resolve_date(from_path) == PathDate(datetime(2024, 5, 1))

    assert resolve_date(Document(path="/about.markdown")) is None


def test_select_orders_newest_first_and_skips_undated():
    docs = [
        Document(path="/2024/05/01/old/index.markdown"),
        Document(path="/about.markdown"),
        Document(path="/2024/05/03/new/index.markdown"),
        Document(path="/notes/x.markdown", date=datetime(2024, 5, 2)),
    ]
    selected = DocumentSelector(today=date(2024, 6, 1)).select(docs)
    assert [s.path for s in selected] == [
        "/2024/05/03/new/index.markdown",
        "/notes/x.markdown",
        "/2024/05/01/old/index.markdown",
    ]
    assert selected[1].date == datetime(2024, 5, 2)


def test_future_documents_are_withheld():
    docs = [
        Document(path="/2024/06/02/tomorrow/index.markdown"),
        Document(path="/2024/06/01/today/index.markdown"),
        Document(path="/2024/05/01/later/index.markdown", date=datetime(2024, 7, 1)),
    ]
    selected = DocumentSelector(today=date(2024, 6, 1)).select(docs)
    assert [s.path for s in selected] == ["/2024/06/01/today/index.markdown"]
    # The repository listing is untouched
    assert len(docs) == 3


def test_posts_later_on_the_reference_day_are_published():
    doc = Document(path="/x.markdown", date=datetime(2024, 6, 1, 23, 59))
    assert DocumentSelector(today=date(2024, 6, 1)).select([doc])[0].document is doc


def test_equal_dates_keep_repository_order():
    docs = [
        Document(path="/2024/05/01/b/index.markdown"),
        Document(path="/2024/05/01/a/index.markdown"),
        Document(path="/2024/05/01/c/index.markdown"),
    ]
    selected = DocumentSelector(today=date(2024, 6, 1)).select(docs)
    assert [s.document for s in selected] == docs


def test_impossible_path_date_fails():
    docs = [Document(path="/2024/02/30/nope/index.markdown")]
    with pytest.raises(ParseError) as excinfo:
        DocumentSelector(today=date(2024, 6, 1)).select(docs)
    assert "/2024/02/30/nope/index.markdown" in str(excinfo.value)


def test_default_reference_date_is_today():
    selector = DocumentSelector()
    assert selector.reference_date() == date.today()
    assert DocumentSelector(date(2020, 1, 1)).reference_date() == date(2020, 1, 1)
