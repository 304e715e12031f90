"""
Managers for Arbor.

This package contains focused manager classes that handle specific aspects of Arbor functionality:
- TreeIndex: Id lookups and parent resolution over one tree
- DocumentManager: Structural operations on the document (container) tree
- NoteManager: Node editing inside one leaf's content tree
- StorageManager: Persistence to the .arbor/ folder structure
"""

from arbor.managers.tree_index import TreeIndex
from arbor.managers.document_manager import DocumentManager, DuplicateOutcome
from arbor.managers.note_manager import (
    NoteManager,
    cap_text,
    clone_content_tree,
    default_note,
    rebind_root,
)
from arbor.managers.storage_manager import StorageManager

__all__ = [
    "TreeIndex",
    "DocumentManager",
    "DuplicateOutcome",
    "NoteManager",
    "cap_text",
    "clone_content_tree",
    "default_note",
    "rebind_root",
    "StorageManager",
]
