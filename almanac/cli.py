"""Command-line interface for Almanac.

This module defines the CLI commands using Click framework.

Commands:
- build: Compile and write the site into the output directory.
- post: Create a new blog post.
- tags: List the tags of published posts.
- recent: List the most recent posts.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path

import click
import questionary

from . import __version__
from .build import build_site, create_compiler, load_config
from .content import Document, DocumentStore, dump_document, parse_document
from .errors import AlmanacError
from .utils import make_slug

DEFAULT_POST_CONTENT = "Markdown content goes here.\n"

_DATE = click.DateTime(formats=["%Y-%m-%d"])


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _report_error(exc: AlmanacError, heading: str = "Failed:") -> None:
    click.echo(click.style(heading, fg="red", bold=True), err=True)
    click.echo(click.style(f"  Error: {exc}", fg="yellow"), err=True)


@click.group()
@click.version_option(version=__version__, prog_name="almanac")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Almanac blog compiler."""
    setup_logging(verbose)


@cli.command()
@click.option("--date", "today", type=_DATE, help="Build as of this date (YYYY-MM-DD)")
def build(today: datetime | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    try:
        result = build_site(project_root, today=today.date() if today else None)
    except AlmanacError as exc:
        _report_error(exc, "Build failed:")
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.pages)} pages into {result.output_dir}")


@cli.command()
@click.argument("title", nargs=-1)
@click.option("--date", "post_date", type=_DATE, help="Post date (YYYY-MM-DD), defaults to today")
@click.option("--tag", "tags", multiple=True, help="Tag for the post (repeatable)")
@click.option(
    "--edit/--no-edit",
    default=None,
    help="Open the post in $EDITOR before saving (default: when $EDITOR is set)",
)
def post(title: tuple[str, ...], post_date: datetime | None, tags: tuple[str, ...], edit: bool | None):
    """Create a new blog post with the given title.

    Content piped on stdin (optionally with front matter) becomes the body
    of the post.
    """
    project_root = Path.cwd()
    try:
        config = load_config(project_root)
    except AlmanacError as exc:
        raise click.ClickException(str(exc)) from exc
    store = DocumentStore(project_root / str(config["blog"]["store"]))
    day = post_date.date() if post_date else date.today()

    document = Document(path="", title=" ".join(title), content=DEFAULT_POST_CONTENT, tags=tags)
    piped = "" if sys.stdin.isatty() else sys.stdin.read()
    if piped.strip():
        parsed = _parse_input("<stdin>", piped)
        document = replace(
            parsed,
            title=parsed.title or document.title,
            tags=parsed.tags or document.tags,
        )

    if edit is None:
        edit = bool(os.environ.get("EDITOR")) and sys.stdin.isatty()
    if edit:
        edited = click.edit(dump_document(document), extension=".markdown")
        if edited is not None:
            document = _parse_input("<editor>", edited)

    if not document.title:
        answer = questionary.text(
            "Post title:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if answer is None:
            raise click.Abort()
        document = replace(document, title=answer.strip())

    slug = make_slug(document.title)
    if not slug:
        raise click.ClickException(f"Cannot make a slug from title {document.title!r}")
    path = f"/{day:%Y}/{day:%m}/{day:%d}/{slug}/index.markdown"
    if store.open_file(path).exists():
        raise click.ClickException(f"Post already exists: {path}")

    try:
        full_path = store.write_document(path, replace(document, path=path))
    except AlmanacError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"New post at: {full_path}")


@cli.command()
def tags():
    """List the tags of published posts."""
    project_root = Path.cwd()
    try:
        compiler = create_compiler(project_root, load_config(project_root))
        links = compiler.tags(compiler.post_pages())
    except AlmanacError as exc:
        _report_error(exc)
        raise SystemExit(1) from None
    for link in links:
        click.echo(f"{link.text}\t{link.href}")


@cli.command()
@click.option("-n", "--count", type=click.IntRange(min=1), default=5, show_default=True)
@click.option("--tag", help="Only show posts with this tag")
def recent(count: int, tag: str | None):
    """List the most recent posts."""
    project_root = Path.cwd()
    try:
        compiler = create_compiler(project_root, load_config(project_root))
        pages = compiler.recent_posts(count, tags=tag)
    except AlmanacError as exc:
        _report_error(exc)
        raise SystemExit(1) from None
    for page in pages:
        click.echo(f"{page.date:%Y-%m-%d}\t{page.title}\t{compiler.page_url(page)}")


def _parse_input(source: str, text: str) -> Document:
    try:
        return parse_document(source, text)
    except AlmanacError as exc:
        raise click.ClickException(str(exc)) from exc


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
