"""Site building functionality for Almanac.

This module loads configuration, compiles the blog into pages, renders
each page through the theme and writes the output files.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from almanac.yaml.
- create_compiler: Creates a BlogCompiler from configuration.
"""

from __future__ import annotations

import copy
import logging
import shutil
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateError

from .blog import BlogCompiler
from .content import DocumentStore
from .errors import AlmanacError, ConfigError
from .feeds import DEFAULT_FEEDS, feed_kinds_from_config
from .pages import FilePage, Page
from .theme import Theme
from .utils import ensure_clean_dir

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "almanac.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "output_dir": "output",
    "theme": None,
    "title": "Almanac",
    "url": "",
    "blog": {
        "store": "blog",
        "url_root": "/",
        "page_size": 5,
        "index_tags": [],
    },
}


class BuildError(AlmanacError):
    """Error during site build with page context.

    Attributes:
        source_path: Output path of the page that failed to render.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        pages: List of all pages in the site.
        output_dir: Directory where the site was built.
        config: Configuration the site was built with.
    """

    pages: list[Page]
    output_dir: Path
    config: dict[str, Any]


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from almanac.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    config_path = project_root / CONFIG_FILENAME
    config = copy.deepcopy(DEFAULT_CONFIG)
    if not config_path.exists():
        return config
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"{config_path}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"{config_path}: configuration must be a mapping")
    blog = loaded.pop("blog", None) or {}
    if not isinstance(blog, dict):
        raise ConfigError(f"{config_path}: 'blog' must be a mapping")
    config.update(loaded)
    config["blog"].update(blog)
    return config


def create_compiler(
    project_root: Path,
    config: dict[str, Any],
    today: date | None = None,
) -> BlogCompiler:
    """Create a BlogCompiler from configuration.

    Args:
        project_root: Root directory of the project.
        config: Configuration as returned by load_config.
        today: Optional reference date for scheduled posts.

    Returns:
        Configured compiler.

    Raises:
        ConfigError: If a setting is invalid or a template is missing.
    """
    blog = config["blog"]
    theme_dir = config.get("theme")
    theme = Theme(project_root / theme_dir if theme_dir else None)
    feeds = blog.get("feeds")
    return BlogCompiler(
        DocumentStore(project_root / str(blog.get("store", "blog"))),
        theme,
        url_root=str(blog.get("url_root") or "/"),
        page_size=blog.get("page_size", 5),
        index_tags=blog.get("index_tags") or (),
        feeds=feed_kinds_from_config(feeds) if feeds else DEFAULT_FEEDS,
        today=today,
    )


def build_site(
    project_root: Path,
    today: date | None = None,
    clean_output: bool = True,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        today: Reference date; posts dated after it are left out.
        clean_output: Whether to wipe the output directory before building.
        output_dir_override: Optional path to write the build output instead of config output_dir.

    Returns:
        BuildResult containing all pages, output directory, and configuration.

    Raises:
        ConfigError: If the configuration is invalid.
        ParseError: If a post's date cannot be derived.
        RepositoryError: If a document cannot be read.
        BuildError: If a page fails to render.
    """
    config = load_config(project_root)
    compiler = create_compiler(project_root, config, today=today)
    pages = compiler.pages()

    output_dir = output_dir_override or (project_root / config["output_dir"])
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
    app_dir = output_dir / compiler.url_root.strip("/")

    site = {key: value for key, value in config.items() if key != "blog"}
    for page in pages:
        target = app_dir / page.path.lstrip("/")
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(page, FilePage):
            shutil.copy2(page.source, target)
            continue
        rendered = render_page(page, site, compiler)
        target.write_text(rendered, encoding="utf-8")

    logger.info("Wrote %d pages to %s", len(pages), output_dir)
    return BuildResult(pages=pages, output_dir=output_dir, config=config)


def render_page(page: Page, site: dict[str, Any], app: BlogCompiler) -> str:
    """Render a page with its template and layout.

    Args:
        page: Page to render.
        site: Site-wide values (title, url...).
        app: The compiler, exposed to templates for tags and recent posts.

    Returns:
        Rendered text.

    Raises:
        BuildError: If the page has no template or rendering fails.
    """
    if page.template is None:
        raise BuildError(page.path, "page has no template")
    context = {"site": site, "app": app, "current_page": page, **page.variables()}
    try:
        body = page.template.render(**context)
        if page.layout is None:
            return body
        return page.layout.render(**{**context, "content": body})
    except TemplateError as exc:
        raise BuildError(page.path, _format_error_message(exc), exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateSyntaxError":
        return f"Template syntax error on line {getattr(exc, 'lineno', '?')}: {error_msg}"

    return f"{error_type}: {error_msg}"
