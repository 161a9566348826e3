from datetime import date, datetime

import pytest

from almanac.blog import BlogCompiler, IndexTagDirective, is_indexed, parse_index_tags
from almanac.content import Document, DocumentStore
from almanac.errors import ConfigError, ParseError
from almanac.links import Link
from almanac.pages import FeedPage, FilePage, ListPage, PostPage

TODAY = date(2024, 6, 1)


class FakeStore:
    def __init__(self, documents):
        self.docs = list(documents)

    def documents(self):
        return list(self.docs)


class FakeTheme:
    def __init__(self, missing=()):
        self.missing = set(missing)

    def template(self, group, name):
        if (group, name) in self.missing:
            raise ConfigError(f"template {group}/{name} not found")
        return f"{group}/{name}"


def doc(path, *tags, date=None):
    return Document(path=path, title=path.split("/")[-2], tags=tuple(tags), date=date)


def make_compiler(documents, **kwargs):
    kwargs.setdefault("today", TODAY)
    return BlogCompiler(FakeStore(documents), FakeTheme(), **kwargs)


def twelve_posts():
    return [doc(f"/2024/05/{day:02d}/post-{day}/index.markdown") for day in range(1, 13)]


def test_index_run_and_feeds():
    compiler = make_compiler(twelve_posts(), page_size=5)
    index = compiler.index(compiler.post_pages())

    assert [p.path for p in index] == [
        "/index.html",
        "/page/2/index.html",
        "/page/3/index.html",
        "/index.atom",
        "/index.rss",
    ]
    run = index[:3]
    assert all(isinstance(p, ListPage) for p in run)
    assert [len(p.pages) for p in run] == [5, 5, 2]
    assert run[0].pages[0].path == "/2024/05/12/post-12/index.html"
    assert run[2].pages[-1].path == "/2024/05/01/post-1/index.html"
    assert all(isinstance(p, FeedPage) for p in index[3:])
    assert all(p.template == "blog/index.html" and p.layout == "site/layout.html" for p in run)


def test_pages_are_in_output_order():
    documents = twelve_posts()
    documents[0] = doc("/2024/05/01/post-1/index.markdown", "perl")
    compiler = make_compiler(documents, page_size=5)
    pages = compiler.pages()

    kinds = [type(p).__name__ for p in pages]
    assert kinds == ["ListPage"] * 3 + ["FeedPage"] * 2 + ["ListPage", "FeedPage", "FeedPage"] + ["PostPage"] * 12
    assert [p.path for p in pages[5:8]] == ["/tag/perl/index.html", "/tag/perl.atom", "/tag/perl.rss"]
    assert pages[-1].path == "/2024/05/01/post-1/index.html"
    assert pages[8].template == "blog/post.html"


def test_index_tags_filter_the_index_only():
    documents = [
        doc("/2024/05/04/a/index.markdown", "foo"),
        doc("/2024/05/03/b/index.markdown", "foo", "bar"),
        doc("/2024/05/02/c/index.markdown", "bar"),
        doc("/2024/05/01/d/index.markdown"),
    ]
    compiler = make_compiler(documents, index_tags=["-foo", "+bar"])
    posts = compiler.post_pages()
    index = compiler.index(posts)

    assert [p.path for p in index[0].pages] == [
        "/2024/05/03/b/index.html",
        "/2024/05/02/c/index.html",
        "/2024/05/01/d/index.html",
    ]
    assert len(posts) == 4
    tag_paths = [p.path for p in compiler.tag_pages(posts)]
    assert "/tag/foo/index.html" in tag_paths


def test_index_with_every_post_filtered_out_has_no_pages():
    compiler = make_compiler([doc("/2024/05/01/a/index.markdown", "private")], index_tags=["-private"])
    assert compiler.index(compiler.post_pages()) == []


def test_is_indexed_is_idempotent():
    directives = parse_index_tags(["-foo", "+bar"])
    assert is_indexed(["foo", "bar"], directives)
    assert not is_indexed(["foo"], directives)
    assert is_indexed([], directives)
    assert is_indexed(["foo", "bar"], directives + directives)
    assert not is_indexed(["foo"], directives + directives)
    assert parse_index_tags(["+x"]) == (IndexTagDirective(include=True, tag="x"),)
    assert str(directives[0]) == "-foo"


@pytest.mark.parametrize("spec", ["foo", "+", "", 3])
def test_malformed_index_tags(spec):
    with pytest.raises(ConfigError):
        make_compiler([], index_tags=[spec])


def test_recent_posts_with_tag_and_url_root():
    documents = [
        doc("/2024/05/05/a/index.markdown", "launch"),
        doc("/2024/05/04/b/index.markdown"),
        doc("/2024/05/03/c/index.markdown"),
        doc("/2024/05/02/d/index.markdown", "launch"),
        doc("/2024/05/01/e/index.markdown"),
    ]
    compiler = make_compiler(documents, url_root="/blog")

    recent = compiler.recent_posts(2, tags="launch")
    assert [p.path for p in recent] == [
        "/blog/2024/05/05/a/index.html",
        "/blog/2024/05/02/d/index.html",
    ]
    assert all(isinstance(p, PostPage) for p in recent)
    assert [p.path for p in compiler.recent_posts(3)] == [
        "/blog/2024/05/05/a/index.html",
        "/blog/2024/05/04/b/index.html",
        "/blog/2024/05/03/c/index.html",
    ]
    assert compiler.recent_posts(0) == []
    assert compiler.recent_posts(5, tags="missing") == []


def test_recent_posts_skip_future_posts():
    documents = [doc("/2024/06/02/soon/index.markdown"), doc("/2024/05/30/now/index.markdown")]
    compiler = make_compiler(documents)
    assert [p.path for p in compiler.recent_posts(5)] == ["/2024/05/30/now/index.html"]


def test_tags_use_the_last_snapshot():
    documents = [doc("/2024/05/01/a/index.markdown", "perl"), doc("/2024/05/02/b/index.markdown", "go")]
    compiler = make_compiler(documents, url_root="/blog/")
    assert compiler.tags() == []

    first = compiler.post_pages()
    assert compiler.last_post_pages is first
    assert compiler.tags() == [
        Link(text="go", href="/blog/tag/go/"),
        Link(text="perl", href="/blog/tag/perl/"),
    ]

    compiler.store.docs.append(doc("/2024/05/03/c/index.markdown", "ada"))
    second = compiler.post_pages()
    assert len(first) == 2
    assert len(second) == 3
    assert [link.text for link in compiler.tags()] == ["ada", "go", "perl"]
    assert [link.text for link in compiler.tags(first)] == ["go", "perl"]


def test_future_posts_are_withheld_everywhere():
    documents = [
        doc("/2024/06/02/tomorrow/index.markdown", "perl"),
        doc("/2024/05/01/past/index.markdown"),
    ]
    pages = make_compiler(documents).pages()
    paths = [p.path for p in pages]
    assert "/2024/06/02/tomorrow/index.html" not in paths
    assert "/tag/perl/index.html" not in paths
    assert "/2024/05/01/past/index.html" in paths


def test_explicit_date_in_the_future_is_withheld():
    documents = [doc("/2024/05/01/a/index.markdown", date=datetime(2024, 7, 1))]
    assert make_compiler(documents).post_pages() == ()


def test_bad_path_date_fails_the_build():
    compiler = make_compiler([doc("/2024/13/40/bad/index.markdown")])
    with pytest.raises(ParseError) as excinfo:
        compiler.pages()
    assert excinfo.value.path == "/2024/13/40/bad/index.markdown"


def test_configuration_is_checked_up_front():
    with pytest.raises(ConfigError):
        make_compiler([], page_size=0)
    with pytest.raises(ConfigError):
        BlogCompiler(FakeStore([]), FakeTheme(missing=[("blog", "index.rss")]))
    with pytest.raises(ConfigError):
        BlogCompiler(FakeStore([]), FakeTheme(missing=[("site", "layout.html")]))


def test_no_posts_means_no_pages():
    assert make_compiler([]).pages() == []


def test_url_root_normalisation_and_page_url():
    compiler = make_compiler([], url_root="blog/")
    assert compiler.url_root == "/blog"
    assert make_compiler([], url_root="").url_root == "/"

    post = PostPage(path="/2024/05/01/a/index.html", document=Document(path="x"), published=datetime(2024, 5, 1))
    assert compiler.page_url(post) == "/blog/2024/05/01/a/"
    assert compiler.page_url(compiler.index([post])[-1]) == "/blog/index.rss"
    assert make_compiler([]).page_url(post) == "/2024/05/01/a/"


def test_page_url_does_not_guess_the_url_root():
    compiler = make_compiler([], url_root="/blog")
    # A post stored under a top-level blog/ directory
    post = PostPage(
        path="/blog/2024/05/01/a/index.html",
        document=Document(path="/blog/2024/05/01/a/index.markdown"),
        published=datetime(2024, 5, 1),
    )
    assert compiler.page_url(post) == "/blog/blog/2024/05/01/a/"


def test_recent_posts_are_not_prefixed_twice():
    documents = [doc("/blog/2024/05/01/a/index.markdown"), doc("/2024/05/02/b/index.markdown")]
    compiler = make_compiler(documents, url_root="/blog")
    recent = compiler.recent_posts(5)
    assert all(page.rooted for page in recent)
    assert [compiler.page_url(page) for page in recent] == [
        "/blog/2024/05/02/b/",
        "/blog/blog/2024/05/01/a/",
    ]
    assert not any(page.rooted for page in compiler.post_pages())


def test_bad_front_matter_date_fails_with_the_document_path(tmp_path):
    root = tmp_path / "blog"
    (root / "2024" / "05" / "01" / "a").mkdir(parents=True)
    (root / "2024" / "05" / "01" / "a" / "index.markdown").write_text(
        "---\ndate: 2024-02-30\n---\nBody\n", encoding="utf-8"
    )
    compiler = BlogCompiler(DocumentStore(root), FakeTheme(), today=TODAY)
    with pytest.raises(ParseError) as excinfo:
        compiler.pages()
    assert excinfo.value.path == "/2024/05/01/a/index.markdown"


@pytest.mark.parametrize("tag", ["../../escape", "a/b", "..", ".", "a\\b"])
def test_tags_that_are_not_path_segments_fail(tag):
    compiler = make_compiler([doc("/2024/05/01/a/index.markdown", tag)])
    with pytest.raises(ParseError) as excinfo:
        compiler.pages()
    assert excinfo.value.path == "/2024/05/01/a/index.markdown"


def test_post_files_come_from_post_directories(tmp_path):
    root = tmp_path / "blog"
    post_dir = root / "2024" / "05" / "01" / "hello"
    post_dir.mkdir(parents=True)
    (post_dir / "index.markdown").write_text("---\ntitle: Hello\n---\nHi\n", encoding="utf-8")
    (post_dir / "photo.png").write_bytes(b"png")
    (root / "static").mkdir()
    (root / "static" / "logo.png").write_bytes(b"logo")

    compiler = BlogCompiler(DocumentStore(root), FakeTheme(), today=TODAY)
    files = compiler.post_files()
    assert [f.path for f in files] == ["/2024/05/01/hello/photo.png"]
    assert isinstance(files[0], FilePage)
    assert files[0].source == post_dir / "photo.png"

    pages = compiler.pages()
    assert [type(p).__name__ for p in pages] == ["ListPage", "FeedPage", "FeedPage", "FilePage", "PostPage"]
