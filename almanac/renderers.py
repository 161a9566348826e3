"""Markdown rendering for Almanac.

Post content is written in Markdown and rendered to HTML with mistune when
a page's template variables are requested.

Key classes:
- _HeadingRenderer: mistune HTML renderer that gives headings anchor ids.

Key functions:
- render_markdown: Render Markdown text to HTML.
"""

from __future__ import annotations

import re

import mistune


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = text.lower().strip()
    slug = re.sub(r"<[^>]+>", "", slug)
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _HeadingRenderer(mistune.HTMLRenderer):
    """HTML renderer that adds unique ``id`` attributes to headings."""

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'


def render_markdown(text: str) -> str:
    """Render Markdown to HTML.

    Args:
        text: Markdown source.

    Returns:
        Rendered HTML.
    """
    markdown = mistune.create_markdown(
        renderer=_HeadingRenderer(),
        plugins=["strikethrough", "footnotes", "table", "url"],
    )
    return markdown(text)
