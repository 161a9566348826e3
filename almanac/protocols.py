"""Protocol definitions for Almanac.

These protocols describe the collaborators the blog compiler depends on.
The compiler never reads files or renders templates itself; it is handed
a document repository, a template resolver and a file enumerator.

These protocols enable:
- Loose coupling between the compiler and the filesystem
- Easy testing through in-memory implementations
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .content import Document


@runtime_checkable
class DocumentRepository(Protocol):
    """Protocol for a source of already-parsed documents."""

    @abstractmethod
    def documents(self) -> list[Document]:
        """Return every document in the repository.

        Raises:
            RepositoryError: If the repository cannot be read.
        """
        ...


@runtime_checkable
class FileEnumerator(Protocol):
    """Protocol for listing non-document files next to the documents."""

    @abstractmethod
    def find_files(self) -> list[str]:
        """Return store paths of every non-document file."""
        ...

    @abstractmethod
    def open_file(self, path: str) -> Any:
        """Return a handle (usually a filesystem path) for a store file."""
        ...


@runtime_checkable
class TemplateResolver(Protocol):
    """Protocol for resolving templates by group and name.

    The compiler only stores the returned handles on pages; rendering is
    done later by the build.
    """

    @abstractmethod
    def template(self, group: str, name: str) -> Any:
        """Return an opaque renderable handle.

        Args:
            group: Template group, such as ``site`` or ``blog``.
            name: Template name within the group, such as ``post.html``.

        Raises:
            ConfigError: If no such template exists.
        """
        ...
