"""
TreeIndex for id lookups over one tree.

Builds two maps on demand: id -> node and id -> parent id. Parents are kept
as id references, never as node pointers, so a reparented node only needs
its one entry updated. The mutation managers keep the index correct
incrementally; anything else that changes the tree structurally must call
``invalidate()`` before the next lookup.
"""

from typing import Dict, List, Optional, Set, Tuple

from arbor.exceptions import TreeIntegrityError
from arbor.models.base import TreeNode


class TreeIndex:
    """
    Lazily built lookup tables over a tree.

    Handles:
    - id -> node lookup (find)
    - id -> parent lookup (find_with_parent), verified against the live tree
    - ancestry queries (ancestors, is_descendant)
    - incremental upkeep after mutations (register/unregister/reparent)
    """

    def __init__(self, root: TreeNode) -> None:
        """
        Initialize TreeIndex.

        Args:
            root: Root node of the tree to index. Nothing is scanned until the
                first lookup.
        """
        self.root = root
        self._nodes: Dict[str, TreeNode] = {}
        self._parent_ids: Dict[str, Optional[str]] = {}
        self._built = False

    # =========================================================================
    # Building
    # =========================================================================

    def build(self) -> None:
        """Rebuild both maps from the tree.

        Raises:
            TreeIntegrityError: If the same id appears twice in the tree.
        """
        self._nodes.clear()
        self._parent_ids.clear()
        self._register(self.root, None)
        self._built = True

    def invalidate(self) -> None:
        """Drop the maps; the next lookup rebuilds them."""
        self._built = False

    def refresh(self) -> "TreeIndex":
        """Rebuild immediately and return self."""
        self.build()
        return self

    def _ensure_built(self) -> None:
        if not self._built:
            self.build()

    def _register(self, node: TreeNode, parent_id: Optional[str]) -> None:
        stack: List[Tuple[TreeNode, Optional[str]]] = [(node, parent_id)]
        while stack:
            current, current_parent = stack.pop()
            if current.node_id in self._nodes:
                raise TreeIntegrityError(
                    f"Duplicate id '{current.node_id}' found while indexing tree"
                )
            self._nodes[current.node_id] = current
            self._parent_ids[current.node_id] = current_parent
            for child in current.child_nodes():
                stack.append((child, current.node_id))

    # =========================================================================
    # Lookups
    # =========================================================================

    def find(self, node_id: str) -> Optional[TreeNode]:
        """Return the node with this id, or None."""
        self._ensure_built()
        return self._nodes.get(node_id)

    def find_with_parent(
        self, node_id: str
    ) -> Optional[Tuple[TreeNode, Optional[TreeNode]]]:
        """Return (node, parent) for this id, or None if absent.

        The root's parent is None.

        Raises:
            TreeIntegrityError: If the indexed parent no longer holds the node,
                i.e. the tree changed behind the index's back.
        """
        self._ensure_built()
        node = self._nodes.get(node_id)
        if node is None:
            return None

        parent_id = self._parent_ids[node_id]
        if parent_id is None:
            if node is not self.root:
                raise TreeIntegrityError(
                    f"Index is stale: '{node_id}' is indexed as root but is not the tree root"
                )
            return node, None

        parent = self._nodes[parent_id]
        if not any(child is node for child in parent.child_nodes()):
            raise TreeIntegrityError(
                f"Index is stale: '{node_id}' is no longer a child of '{parent_id}'"
            )
        return node, parent

    def parent_id(self, node_id: str) -> Optional[str]:
        """Id of the node's parent (None for the root or unknown ids)."""
        self._ensure_built()
        return self._parent_ids.get(node_id)

    def ancestors(self, node_id: str) -> List[str]:
        """Ids from the node's parent up to the root."""
        self._ensure_built()
        result: List[str] = []
        current = self._parent_ids.get(node_id)
        while current is not None:
            result.append(current)
            current = self._parent_ids.get(current)
        return result

    def is_descendant(self, node_id: str, ancestor_id: str) -> bool:
        """True if ``node_id`` lies strictly below ``ancestor_id``."""
        return ancestor_id in self.ancestors(node_id)

    def ids(self) -> Set[str]:
        """All ids currently indexed."""
        self._ensure_built()
        return set(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        self._ensure_built()
        return node_id in self._nodes

    def __len__(self) -> int:
        self._ensure_built()
        return len(self._nodes)

    # =========================================================================
    # Incremental upkeep
    # =========================================================================

    def register_subtree(self, node: TreeNode, parent_id: str) -> None:
        """Index a subtree that was just attached under ``parent_id``."""
        if not self._built:
            return
        self._register(node, parent_id)

    def unregister_subtree(self, node: TreeNode) -> None:
        """Forget a subtree that was just detached from the tree."""
        if not self._built:
            return
        for descendant in node.walk():
            self._nodes.pop(descendant.node_id, None)
            self._parent_ids.pop(descendant.node_id, None)

    def reparent(self, node_id: str, new_parent_id: str) -> None:
        """Record that a node now lives under ``new_parent_id``."""
        if not self._built:
            return
        self._parent_ids[node_id] = new_parent_id

    def snapshot(self) -> Dict[str, Optional[str]]:
        """Copy of the id -> parent id map (for consistency checks)."""
        self._ensure_built()
        return dict(self._parent_ids)
