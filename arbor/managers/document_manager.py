"""
DocumentManager for the container (document) tree.

Handles all structural operations on folders and leaves. Every operation
resolves its targets through the TreeIndex and validates before touching the
tree, so a failed call leaves the tree exactly as it was.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from loguru import logger

from arbor.constants import COPY_SUFFIX, VALID_KINDS, VALIDATION_INVALID_KIND, VALIDATION_TITLE_REQUIRED
from arbor.exceptions import InvalidOperationError, NotFoundError, ValidationError
from arbor.ids import IdFactory, fresh_id, unique_id
from arbor.managers.tree_index import TreeIndex
from arbor.models.container import ContainerNode, NodeKind


@dataclass
class DuplicateOutcome:
    """Result of duplicating a subtree.

    Attributes:
        node: Root of the clone, already inserted after the original.
        key_map: Original key -> clone key for every node in the subtree.
        leaf_keys: Original keys of the leaves that were cloned, in pre-order.
    """

    node: ContainerNode
    key_map: Dict[str, str] = field(default_factory=dict)
    leaf_keys: List[str] = field(default_factory=list)


class DocumentManager:
    """
    Manages structural operations on one document tree.

    Handles:
    - Creating folders and leaves
    - Renaming
    - Moving (with root and cycle protection)
    - Duplicating subtrees with fresh keys
    - Soft delete, hard delete and restore

    Usage:
        manager = DocumentManager(tree)
        folder = manager.create(tree.key, "Projects", "folder")
        manager.rename(folder.key, "Work")
    """

    def __init__(self, tree: ContainerNode, id_factory: IdFactory = fresh_id) -> None:
        """
        Initialize DocumentManager.

        Args:
            tree: Root of the document tree. Mutated in place.
            id_factory: Source of fresh keys.
        """
        self.tree = tree
        self.index = TreeIndex(tree)
        self._id_factory = id_factory

    # =========================================================================
    # Resolution helpers
    # =========================================================================

    def _resolve(self, key: str) -> ContainerNode:
        node = self.index.find(key)
        if node is None:
            raise NotFoundError(
                f"Node not found: '{key}'. "
                f"Please verify the key is correct and the node exists."
            )
        return node

    def _resolve_with_parent(self, key: str, action: str):
        found = self.index.find_with_parent(key)
        if found is None:
            raise NotFoundError(
                f"Node not found: '{key}'. "
                f"Please verify the key is correct and the node exists."
            )
        node, parent = found
        if parent is None:
            raise InvalidOperationError(f"Cannot {action} the root node.")
        return node, parent

    def _resolve_folder(self, key: str, role: str = "Parent") -> ContainerNode:
        node = self._resolve(key)
        if not node.is_folder:
            raise InvalidOperationError(
                f"{role} '{key}' is a leaf. Only folders can hold children."
            )
        return node

    def _new_key(self) -> str:
        return unique_id(self.index, self._id_factory)

    @staticmethod
    def _validate_title(title: Optional[str]) -> str:
        if title is None or not title.strip():
            raise ValidationError(VALIDATION_TITLE_REQUIRED)
        return title.strip()

    @staticmethod
    def _validate_kind(kind) -> NodeKind:
        value = kind.value if isinstance(kind, NodeKind) else kind
        if value not in VALID_KINDS:
            raise ValidationError(f"Invalid kind: '{kind}'. {VALIDATION_INVALID_KIND}")
        return NodeKind(value)

    # =========================================================================
    # Operations
    # =========================================================================

    def get(self, key: str) -> ContainerNode:
        """Return the node for ``key``.

        Raises:
            NotFoundError: If the key is absent.
        """
        return self._resolve(key)

    def create(self, parent_key: str, title: str, kind) -> ContainerNode:
        """Append a new node as the last child of ``parent_key``.

        Args:
            parent_key: Key of the folder to add to.
            title: Title of the new node.
            kind: "folder" or "leaf" (or NodeKind).

        Returns:
            The newly created node.

        Raises:
            ValidationError: If the title is blank or the kind unknown.
            NotFoundError: If the parent does not exist.
            InvalidOperationError: If the parent is a leaf.
        """
        clean_title = self._validate_title(title)
        node_kind = self._validate_kind(kind)
        parent = self._resolve_folder(parent_key)

        new_node = ContainerNode(
            key=self._new_key(),
            title=clean_title,
            kind=node_kind,
            children=[] if node_kind is NodeKind.FOLDER else None,
        )
        parent.children.append(new_node)
        self.index.register_subtree(new_node, parent.key)

        logger.debug(f"Created {node_kind.value} '{new_node.key}' under '{parent.key}'")
        return new_node

    def rename(self, key: str, title: str) -> ContainerNode:
        """Replace a node's title in place.

        Raises:
            ValidationError: If the title is blank.
            NotFoundError: If the node does not exist.
        """
        clean_title = self._validate_title(title)
        node = self._resolve(key)
        node.title = clean_title
        logger.debug(f"Renamed '{key}' to {clean_title!r}")
        return node

    def move(
        self, key: str, new_parent_key: str, position: Optional[int] = None
    ) -> ContainerNode:
        """Move a node under a new parent.

        The node is detached first, then inserted at ``position`` clamped to
        the destination's current length (default: end).

        Raises:
            NotFoundError: If the node or the destination does not exist.
            InvalidOperationError: If the node is the root, the destination is
                a leaf, or the destination is the node itself or one of its
                descendants.
        """
        node, source_parent = self._resolve_with_parent(key, "move")
        destination = self._resolve_folder(new_parent_key, role="Destination")

        if destination.key == key or self.index.is_descendant(destination.key, key):
            raise InvalidOperationError(
                f"Cannot move '{key}' into itself or one of its descendants."
            )

        del source_parent.children[source_parent.find_child_index(key)]
        length = len(destination.children)
        insert_at = length if position is None else max(0, min(position, length))
        destination.children.insert(insert_at, node)
        self.index.reparent(key, destination.key)

        logger.debug(f"Moved '{key}' to '{destination.key}' at position {insert_at}")
        return node

    def duplicate(self, key: str) -> DuplicateOutcome:
        """Clone a subtree and insert the clone right after the original.

        Every node in the clone gets a fresh key; only the clone root's title
        gets the copy suffix. Deleted flags are not copied.

        Raises:
            NotFoundError: If the node does not exist.
            InvalidOperationError: If the node is the root.
        """
        node, parent = self._resolve_with_parent(key, "duplicate")

        outcome = DuplicateOutcome(node=node)
        reserved = set()

        def _clone(source: ContainerNode, is_root: bool) -> ContainerNode:
            new_key = unique_id(_Taken(self.index, reserved), self._id_factory)
            reserved.add(new_key)
            outcome.key_map[source.key] = new_key
            if not source.is_folder:
                outcome.leaf_keys.append(source.key)
            children = None
            if source.children is not None:
                children = [_clone(child, False) for child in source.children]
            return ContainerNode(
                key=new_key,
                title=source.title + COPY_SUFFIX if is_root else source.title,
                kind=source.kind,
                deleted=False,
                children=children,
            )

        clone = _clone(node, True)
        insert_at = parent.find_child_index(key) + 1
        parent.children.insert(insert_at, clone)
        self.index.register_subtree(clone, parent.key)

        outcome.node = clone
        logger.debug(f"Duplicated '{key}' as '{clone.key}' ({len(outcome.key_map)} nodes)")
        return outcome

    def soft_delete(self, key: str) -> ContainerNode:
        """Flag a node as deleted; the subtree stays in place.

        Raises:
            NotFoundError: If the node does not exist.
            InvalidOperationError: If the node is the root.
        """
        node, _ = self._resolve_with_parent(key, "delete")
        node.deleted = True
        logger.debug(f"Soft-deleted '{key}'")
        return node

    def hard_delete(self, key: str) -> ContainerNode:
        """Permanently detach a soft-deleted node and its whole subtree.

        Returns:
            The removed node (with its subtree).

        Raises:
            NotFoundError: If the node does not exist.
            InvalidOperationError: If the node is the root or is not flagged
                as deleted yet.
        """
        node, parent = self._resolve_with_parent(key, "delete")
        if not node.deleted:
            raise InvalidOperationError(
                f"Cannot permanently delete '{key}': only soft-deleted nodes can be "
                f"removed. Please delete it first."
            )

        del parent.children[parent.find_child_index(key)]
        self.index.unregister_subtree(node)
        logger.debug(f"Hard-deleted '{key}'")
        return node

    def restore(self, key: str) -> ContainerNode:
        """Clear the deleted flag on one node.

        Descendants keep their own flags.

        Raises:
            NotFoundError: If the node does not exist.
        """
        node = self._resolve(key)
        node.deleted = False
        logger.debug(f"Restored '{key}'")
        return node

    def visible_tree(self) -> ContainerNode:
        """Copy of the tree with soft-deleted subtrees pruned."""

        def _prune(node: ContainerNode) -> ContainerNode:
            children = None
            if node.children is not None:
                children = [_prune(child) for child in node.children if not child.deleted]
            return node.model_copy(update={"children": children})

        return _prune(self.tree)

    def deleted_nodes(self) -> List[ContainerNode]:
        """Nodes currently flagged as deleted, in pre-order (the trash view)."""
        return [node for node in self.tree.walk() if node.deleted]


class _Taken:
    """Membership over the live index plus keys reserved for a pending clone."""

    def __init__(self, index: TreeIndex, reserved: set) -> None:
        self._index = index
        self._reserved = reserved

    def __contains__(self, key: object) -> bool:
        return key in self._reserved or key in self._index
