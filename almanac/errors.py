"""Error types for Almanac.

Every failure raised by the compiler carries enough context to name the
offending document or setting. The core never retries and never returns a
partial page set; errors propagate to the caller (usually the build).

Classes:
    AlmanacError: Base class for all Almanac errors.
    ParseError: A document's date cannot be derived or a tag is unusable.
    ConfigError: Invalid pagination size, index tag directive, template or feed.
    RepositoryError: The document store failed to read or write a file.
"""

from __future__ import annotations


class AlmanacError(Exception):
    """Base class for errors raised by Almanac."""


class ParseError(AlmanacError):
    """A document's metadata cannot be used (underivable date, unsafe tag).

    Attributes:
        path: Store path of the offending document.
        rule: The rule that was violated.
    """

    def __init__(self, path: str, rule: str):
        self.path = path
        self.rule = rule
        super().__init__(f"{path}: {rule}")


class ConfigError(AlmanacError):
    """Invalid configuration detected before any pages are produced."""


class RepositoryError(AlmanacError):
    """Error reading or writing a document in the store.

    Attributes:
        path: Path of the file that failed.
        message: Human-readable error message.
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        path: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.path = path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{path}: {message}")
