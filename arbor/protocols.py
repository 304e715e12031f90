"""Protocols for the persistence collaborator."""

from typing import Optional, Protocol, runtime_checkable

from arbor.models.container import ContainerNode
from arbor.models.content import ContentNode
from arbor.models.files import DocumentFile, NoteFile


@runtime_checkable
class TreeStore(Protocol):
    """Whole-tree load/replace primitives.

    ``replace_*`` is the only write. When ``expected_version`` is given and
    the stored version differs, the store must raise
    PersistenceConflictError and leave the stored tree untouched. Without it
    the write is last-writer-wins over the whole tree.
    """

    def load_document(self, owner: str) -> DocumentFile:
        """Load an owner's document tree (``tree`` is None when absent)."""
        ...

    def replace_document(
        self, owner: str, tree: ContainerNode, expected_version: Optional[int] = None
    ) -> int:
        """Replace an owner's whole document tree; return the new version."""
        ...

    def load_note(self, doc_key: str) -> NoteFile:
        """Load a leaf's content tree (``tree`` is None when absent)."""
        ...

    def replace_note(
        self, doc_key: str, tree: ContentNode, expected_version: Optional[int] = None
    ) -> int:
        """Replace a leaf's whole content tree; return the new version."""
        ...

    def delete_note(self, doc_key: str) -> None:
        """Remove a leaf's content tree if present."""
        ...
