"""Almanac blog compiler.

This package compiles a directory of dated, tagged Markdown posts into a
static blog: one page per post, paginated index listings, per-tag listings
and RSS/Atom feeds, rendered through a Jinja2 theme.

The main entry point is the CLI module, which provides commands for
building the site, creating posts and listing tags and recent posts.

Architecture:
- content: Document store (Markdown with YAML front matter).
- selector: Publication dates and ordering.
- pages, pagination, tags, feeds: The page graph.
- blog: BlogCompiler, which ties the pieces together.
- theme, build: Rendering and writing the output.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
