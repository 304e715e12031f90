"""
NoteManager for content (outline) trees.

Handles node-level editing inside one leaf's outline: adding children and
siblings, editing text, collapsing, deleting, indenting/outdenting and
reordering. Keeps every node's ``parent_id`` equal to its real parent's id.
"""

from typing import Optional, Tuple

from loguru import logger

from arbor.constants import DEFAULT_NODE_TEXT
from arbor.exceptions import InvalidOperationError, NotFoundError
from arbor.ids import IdFactory, fresh_id, unique_id
from arbor.managers.tree_index import TreeIndex
from arbor.models.content import ContentNode
from arbor.text import cap_text


def clone_content_tree(
    tree: ContentNode, root_id: str, id_factory: IdFactory = fresh_id
) -> ContentNode:
    """Deep-copy a content tree under a new root id.

    The clone's root ``id`` and ``parent_id`` are both ``root_id`` (a content
    root mirrors its owning leaf's key). Every descendant gets a fresh id and
    its ``parent_id`` is rewired to the new id of its parent.

    Args:
        tree: Content tree to copy. Not modified.
        root_id: Id for the clone root (the new leaf key).
        id_factory: Source of fresh descendant ids.

    Returns:
        The cloned tree.
    """
    taken = {root_id}

    def _clone(node: ContentNode, new_id: str, parent_id: str) -> ContentNode:
        children = []
        for child in node.children:
            child_id = unique_id(taken, id_factory)
            taken.add(child_id)
            children.append(_clone(child, child_id, new_id))
        return ContentNode(
            id=new_id,
            text=node.text,
            collapsed=node.collapsed,
            parent_id=parent_id,
            children=children,
        )

    return _clone(tree, root_id, root_id)


def default_note(doc_key: str, title: str, limit: Optional[int] = None) -> ContentNode:
    """Content tree for a leaf that has none yet: a single root."""
    return ContentNode(id=doc_key, text=cap_text(title, limit), parent_id=doc_key)


def rebind_root(tree: ContentNode, root_id: str) -> ContentNode:
    """Give a freshly built tree a new root id, rewiring its direct children."""
    tree.id = root_id
    tree.parent_id = root_id
    for child in tree.children:
        child.parent_id = root_id
    return tree


class NoteManager:
    """
    Manages editing operations on one content tree.

    Handles:
    - Adding child and sibling nodes
    - Editing text and toggling collapse
    - Deleting nodes (physical removal, no soft delete for outline nodes)
    - Demote/promote (indent/outdent)
    - Moving a node up/down among its siblings
    """

    def __init__(
        self,
        tree: ContentNode,
        id_factory: IdFactory = fresh_id,
        max_length: Optional[int] = None,
    ) -> None:
        """
        Initialize NoteManager.

        Args:
            tree: Root of the content tree. Mutated in place.
            id_factory: Source of fresh node ids.
            max_length: Text cap; defaults to the configured cap (100).
        """
        self.tree = tree
        self.index = TreeIndex(tree)
        self._id_factory = id_factory
        self._max_length = max_length

    def _resolve(self, node_id: str) -> ContentNode:
        node = self.index.find(node_id)
        if node is None:
            raise NotFoundError(f"Node with id '{node_id}' not found.")
        return node

    def _resolve_with_parent(self, node_id: str, action: str) -> Tuple[ContentNode, ContentNode]:
        found = self.index.find_with_parent(node_id)
        if found is None:
            raise NotFoundError(f"Node with id '{node_id}' not found.")
        node, parent = found
        if parent is None:
            raise InvalidOperationError(f"Cannot {action} the root node.")
        return node, parent

    def _new_node(self, text: Optional[str], parent_id: str) -> ContentNode:
        return ContentNode(
            id=unique_id(self.index, self._id_factory),
            text=cap_text(DEFAULT_NODE_TEXT if text is None else text, self._max_length),
            parent_id=parent_id,
        )

    def add_child(self, parent_id: str, text: Optional[str] = None) -> ContentNode:
        """Append a new child; a collapsed parent is expanded."""
        parent = self._resolve(parent_id)
        new_node = self._new_node(text, parent.id)
        parent.collapsed = False
        parent.children.append(new_node)
        self.index.register_subtree(new_node, parent.id)
        logger.debug(f"Added child '{new_node.id}' under '{parent.id}'")
        return new_node

    def add_sibling(self, node_id: str, text: Optional[str] = None) -> ContentNode:
        """Insert a new node right after ``node_id``."""
        _, parent = self._resolve_with_parent(node_id, "add a sibling to")
        new_node = self._new_node(text, parent.id)
        parent.children.insert(parent.find_child_index(node_id) + 1, new_node)
        self.index.register_subtree(new_node, parent.id)
        logger.debug(f"Added sibling '{new_node.id}' after '{node_id}'")
        return new_node

    def edit_text(self, node_id: str, text: str) -> ContentNode:
        node = self._resolve(node_id)
        node.text = cap_text(text, self._max_length)
        return node

    def toggle_collapse(self, node_id: str) -> ContentNode:
        """Flip the collapsed flag.

        Raises:
            InvalidOperationError: If the node has no children.
        """
        node = self._resolve(node_id)
        if not node.children:
            raise InvalidOperationError("Leaf nodes cannot be collapsed.")
        node.collapsed = not node.collapsed
        return node

    def delete(self, node_id: str) -> ContentNode:
        """Remove a node and its subtree."""
        node, parent = self._resolve_with_parent(node_id, "delete")
        del parent.children[parent.find_child_index(node_id)]
        self.index.unregister_subtree(node)
        logger.debug(f"Deleted '{node_id}' from '{parent.id}'")
        return node

    def demote(self, node_id: str) -> ContentNode:
        """Make the node the last child of its previous sibling."""
        node, parent = self._resolve_with_parent(node_id, "demote")
        position = parent.find_child_index(node_id)
        if position == 0:
            raise InvalidOperationError("Cannot demote the first child node.")

        new_parent = parent.children[position - 1]
        del parent.children[position]
        new_parent.children.append(node)
        node.parent_id = new_parent.id
        self.index.reparent(node_id, new_parent.id)
        return node

    def promote(self, node_id: str) -> ContentNode:
        """Move the node out of its parent, right after the parent."""
        node, parent = self._resolve_with_parent(node_id, "promote")
        grandparent = self.index.find_with_parent(parent.id)[1]
        if grandparent is None:
            raise InvalidOperationError("Cannot promote a node whose parent is the root.")

        del parent.children[parent.find_child_index(node_id)]
        grandparent.children.insert(grandparent.find_child_index(parent.id) + 1, node)
        node.parent_id = grandparent.id
        self.index.reparent(node_id, grandparent.id)
        return node

    def move_up(self, node_id: str) -> ContentNode:
        return self._swap(node_id, -1)

    def move_down(self, node_id: str) -> ContentNode:
        return self._swap(node_id, 1)

    def _swap(self, node_id: str, offset: int) -> ContentNode:
        node, parent = self._resolve_with_parent(node_id, "move")
        position = parent.find_child_index(node_id)
        target = position + offset
        if target < 0 or target >= len(parent.children):
            edge = "first" if offset < 0 else "last"
            raise InvalidOperationError(f"Cannot move the {edge} child node any further.")
        siblings = parent.children
        siblings[position], siblings[target] = siblings[target], siblings[position]
        return node
