"""Theme loading for Almanac.

A theme is a directory of Jinja2 templates organised in groups:
``<theme>/<group>/<name>.jinja``. The ``site`` group holds the page layout
and the ``blog`` group holds the post, index and feed templates.

Key class:
- Theme: Resolves templates by group and name.

Key functions:
- absolute_urls: Rewrite root-relative URLs in HTML to absolute URLs.
- rfc822: Format a date for RSS.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    Template,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)

from .errors import ConfigError

DEFAULT_THEME_DIR = Path(__file__).parent / "themes" / "default"

_URL_ATTR_RE = re.compile(
    r'(?P<prefix>\b(?:href|src)=["\'])(?P<url>/[^/"\'][^"\']*|/)(?P<suffix>["\'])'
)


def absolute_urls(html: str, base_url: str) -> str:
    """Rewrite root-relative ``href``/``src`` URLs to absolute ones.

    Feed readers have no page URL to resolve against, so links inside feed
    content must carry the site URL.

    Args:
        html: HTML content to process.
        base_url: Site URL such as ``https://example.com``.

    Returns:
        HTML with ``/path`` URLs prefixed by the base URL. Protocol-relative
        and absolute URLs are left alone.

    Examples:
        >>> absolute_urls('<a href="/about/">About</a>', 'https://example.com')
        '<a href="https://example.com/about/">About</a>'
    """
    if not base_url:
        return html
    base = base_url.rstrip("/")

    def repl(match: re.Match) -> str:
        return f"{match.group('prefix')}{base}{match.group('url')}{match.group('suffix')}"

    return _URL_ATTR_RE.sub(repl, html)


def rfc822(value: datetime) -> str:
    """Format a datetime for an RSS ``pubDate``."""
    return value.strftime("%a, %d %b %Y %H:%M:%S +0000")


def iso8601(value: datetime) -> str:
    """Format a datetime for an Atom ``updated`` element."""
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class Theme:
    """Template resolver backed by a directory of Jinja2 templates.

    Attributes:
        source_dir: Directory containing the template groups.
        env: Jinja2 environment.
    """

    def __init__(self, source_dir: Path | None = None):
        """Initialize the theme.

        Args:
            source_dir: Theme directory. Defaults to the bundled theme.

        Raises:
            ConfigError: If the directory does not exist.
        """
        self.source_dir = Path(source_dir) if source_dir else DEFAULT_THEME_DIR
        if not self.source_dir.is_dir():
            raise ConfigError(f"theme directory not found: {self.source_dir}")
        self.env = Environment(
            loader=FileSystemLoader(str(self.source_dir)),
            autoescape=select_autoescape(["html.jinja", "rss.jinja", "atom.jinja"]),
            enable_async=False,
        )
        self.env.filters["absolute_urls"] = absolute_urls
        self.env.filters["rfc822"] = rfc822
        self.env.filters["iso8601"] = iso8601
        self._templates: dict[tuple[str, str], Template] = {}

    def template(self, group: str, name: str) -> Template:
        """Return the template ``<group>/<name>.jinja``.

        Args:
            group: Template group (``site``, ``blog``).
            name: Template name (``layout.html``, ``index.rss``).

        Returns:
            Compiled Jinja2 template.

        Raises:
            ConfigError: If the template is missing or has a syntax error.
        """
        key = (group, name)
        if key not in self._templates:
            filename = f"{group}/{name}.jinja"
            try:
                self._templates[key] = self.env.get_template(filename)
            except TemplateNotFound as exc:
                raise ConfigError(
                    f"template {filename} not found in {self.source_dir}"
                ) from exc
            except TemplateSyntaxError as exc:
                raise ConfigError(
                    f"template {filename} line {exc.lineno}: {exc.message}"
                ) from exc
        return self._templates[key]
